"""
Core Utilities

Common utility functions used across the Intune Role Manager tool.
"""

import logging
import re
import urllib3
from typing import Optional, Type

import requests

from .exceptions import AuthenticationError, ConfigurationError, RemoteServiceError, RoleManagerError
from .constants import ErrorMessages


def setup_logging(debug: bool = False) -> None:
    """
    Set up logging configuration for the application.

    Args:
        debug: Enable debug logging level
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # urllib3 logs every connection at DEBUG, including full request URLs
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if debug:
        logger = logging.getLogger(__name__)
        logger.debug("Debug mode enabled")


def disable_ssl_warnings() -> None:
    """Disable SSL warnings when --skip-tls is used"""
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def mask_sensitive_info(text: str, token: str = None, secret: str = None) -> str:
    """
    Mask sensitive information in text for logging and debug output.

    Args:
        text: Text to mask
        token: Access token to mask (optional)
        secret: Client secret to mask (optional)

    Returns:
        Text with sensitive information masked
    """
    if not text:
        return text

    masked_text = text

    for value in (token, secret):
        if value and value in masked_text:
            masked_text = masked_text.replace(value, "***MASKED***")

    # Bearer tokens in headers or error bodies
    masked_text = re.sub(r'Bearer [A-Za-z0-9+/=._-]+', 'Bearer ***MASKED***', masked_text)

    # JWTs appearing without a Bearer prefix
    masked_text = re.sub(
        r'eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*',
        '***MASKED_JWT***',
        masked_text
    )

    # client_secret=... in form-encoded bodies
    masked_text = re.sub(r'(client_secret=)[^&\s]+', r'\1***MASKED***', masked_text)

    return masked_text


def validate_url(url: str, name: str = "URL") -> bool:
    """
    Validate that the provided string is an http(s) URL.

    Args:
        url: URL to validate
        name: Human-readable name used in error messages

    Returns:
        bool: True if valid URL

    Raises:
        ConfigurationError: If URL is invalid
    """
    if not url or not isinstance(url, str):
        raise ConfigurationError(f"{name} cannot be empty")

    url_pattern = r'^https?:\/\/[a-zA-Z0-9.-]+(?:\:[0-9]+)?(?:\/.*)?$'

    if not re.match(url_pattern, url):
        raise ConfigurationError(f"Invalid {name} format: {url}")

    return True


def validate_display_name(name: str) -> bool:
    """
    Validate a role display name supplied on the command line.

    Raises:
        ConfigurationError: If the name is empty or whitespace only
    """
    if not name or not name.strip():
        raise ConfigurationError("Role display name cannot be empty")
    return True


def validate_delimiter(delimiter: str, source: str = "--delimiter") -> bool:
    """
    Validate a field delimiter for delimited input files.

    Args:
        delimiter: Delimiter value to check
        source: Name of the option or config key, used in the error message

    Raises:
        ConfigurationError: If the delimiter is not exactly one character
    """
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ConfigurationError(f"{source} must be a single character, got {delimiter!r}")
    return True


def escape_odata_string(value: str) -> str:
    """Escape a value for use inside a single-quoted OData string literal"""
    return value.replace("'", "''")


def truncate_string(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length with optional suffix.

    Args:
        text: String to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        str: Truncated string
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def handle_ssl_error(error: Exception, exception_class: Type[RoleManagerError] = RemoteServiceError) -> None:
    """
    Centralized SSL error handling with user-friendly messages

    Args:
        error: The caught exception
        exception_class: The specific exception class to raise

    Raises:
        RoleManagerError: Appropriate error type with user-friendly message
    """
    error_str = str(error)

    if "certificate verify failed" in error_str or "CERTIFICATE_VERIFY_FAILED" in error_str:
        raise exception_class(ErrorMessages.SSL_CERT_VERIFICATION_FAILED)
    elif "SSLError" in error_str or "SSL:" in error_str or isinstance(error, requests.exceptions.SSLError):
        raise exception_class(ErrorMessages.SSL_CONNECTION_ERROR.format(error=error))
    else:
        raise exception_class(f"Connection error: {error}")


def handle_network_error(error: Exception, context: str = "",
                         exception_class: Type[RoleManagerError] = RemoteServiceError) -> None:
    """
    Centralized network error handling with context-specific messages

    Args:
        error: The caught exception (usually a requests.RequestException)
        context: Context information for better error messages
        exception_class: The specific exception class to raise

    Raises:
        RoleManagerError: Appropriate error type with user-friendly message
    """
    if isinstance(error, requests.exceptions.SSLError):
        handle_ssl_error(error, exception_class)

    error_str = str(error).lower()

    if "connection refused" in error_str:
        raise exception_class(f"{context}\n{ErrorMessages.CONNECTION_REFUSED}")
    elif isinstance(error, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)) \
            or "timeout" in error_str or "connection" in error_str:
        raise exception_class(f"{context}\n{ErrorMessages.CONNECTION_TIMEOUT}")
    elif "ssl" in error_str and "certificate" in error_str:
        handle_ssl_error(error, exception_class)
    else:
        raise exception_class(f"{context}: {error}")


def extract_graph_error(response: requests.Response) -> str:
    """
    Extract the human-readable message from a Microsoft Graph error body.

    Graph errors look like {"error": {"code": "...", "message": "..."}}.
    Falls back to the raw (truncated) body when it is not JSON.
    """
    try:
        body = response.json()
    except ValueError:
        return truncate_string(response.text or "", 200)

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        code = error.get("code", "")
        message = error.get("message", "")
        return f"{code}: {message}" if code else message
    # Identity platform token errors: {"error": "invalid_client", "error_description": "..."}
    if isinstance(error, str):
        description = body.get("error_description", "")
        return f"{error}: {truncate_string(description, 200)}" if description else error
    return truncate_string(str(body), 200)


def handle_api_error(response: requests.Response, context: str,
                     exception_class: Optional[Type[RoleManagerError]] = None) -> None:
    """
    Centralized error handling for non-success Microsoft Graph responses

    Args:
        response: The non-success response
        context: What was being attempted (e.g. "Failed to create role")
        exception_class: Exception raised for non-auth errors (defaults to RemoteServiceError)

    Raises:
        AuthenticationError: For 401 and 403 responses
        RoleManagerError: For every other status
    """
    if exception_class is None:
        exception_class = RemoteServiceError

    status = response.status_code
    detail = extract_graph_error(response)

    if status == 401:
        raise AuthenticationError(f"{context}: {ErrorMessages.UNAUTHORIZED}")

    if status == 403:
        raise AuthenticationError(f"{context}: {ErrorMessages.FORBIDDEN}")

    message = f"{context}: HTTP {status}"
    if detail:
        message += f" - {detail}"

    if exception_class is RemoteServiceError:
        raise RemoteServiceError(message, status_code=status, response_text=response.text or "")
    raise exception_class(message)
