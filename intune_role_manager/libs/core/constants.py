"""
Constants Module

Centralized constants for the Intune Role Manager tool to eliminate magic
strings and keep message templates in one place.
"""


class GraphConstants:
    """Microsoft Graph related constants"""

    from enum import Enum

    DEFAULT_BASE_URL = "https://graph.microsoft.com"
    DEFAULT_API_VERSION = "beta"
    DEFAULT_AUTHORITY = "https://login.microsoftonline.com"

    # Application permission scope for client credentials flow
    DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
    REQUIRED_PERMISSION = "DeviceManagementRBAC.ReadWrite.All"

    ROLE_DEFINITIONS_PATH = "deviceManagement/roleDefinitions"
    ROLE_DEFINITION_ODATA_TYPE = "#microsoft.graph.deviceAndAppManagementRoleDefinition"

    class ApiVersion(str, Enum):
        """Supported Microsoft Graph API versions"""
        V1 = "v1.0"
        BETA = "beta"

        def __str__(self) -> str:
            """Return the version segment for use in request URLs"""
            return self.value

    class GrantType(str, Enum):
        """OAuth2 grant types used against the identity platform"""
        CLIENT_CREDENTIALS = "client_credentials"

        def __str__(self) -> str:
            return self.value


class RoleConstants:
    """Role definition and input file constants"""

    from enum import Enum

    DEFAULT_PREFIX = "Microsoft.Intune"
    PREFIX_SEPARATOR = "_"
    DEFAULT_DELIMITER = ","

    ALLOWED_TOKEN = "yes"
    DENIED_TOKEN = "no"

    class Column(str, Enum):
        """Column names of the delimited input format"""
        RESOURCE_ACTION = "ResourceAction"
        ALLOWED = "Allowed"
        DESCRIPTION = "Description"

        def __str__(self) -> str:
            return self.value

    class InputFormat(str, Enum):
        """Supported input file formats"""
        DELIMITED = "csv"
        LINES = "lines"

        def __str__(self) -> str:
            return self.value

        @classmethod
        def extension_map(cls) -> dict:
            """Map of file extensions to input formats"""
            return {
                ".csv": cls.DELIMITED,
                ".txt": cls.LINES,
                ".lst": cls.LINES,
            }


class NetworkConstants:
    """Network-related constants"""

    from enum import IntEnum

    DEFAULT_TIMEOUT = 30
    USER_AGENT = "intune-role-manager/1.0"

    class HTTPStatus(IntEnum):
        """HTTP status codes handled by the Graph client"""
        OK = 200
        CREATED = 201
        NO_CONTENT = 204
        BAD_REQUEST = 400
        UNAUTHORIZED = 401
        FORBIDDEN = 403
        NOT_FOUND = 404
        CONFLICT = 409
        TOO_MANY_REQUESTS = 429


class EnvironmentVariables:
    """Environment variables consulted for authentication"""

    TENANT_ID = "AZURE_TENANT_ID"
    CLIENT_ID = "AZURE_CLIENT_ID"
    CLIENT_SECRET = "AZURE_CLIENT_SECRET"
    ACCESS_TOKEN = "GRAPH_ACCESS_TOKEN"


class ErrorMessages:
    """Centralized error message templates"""

    SSL_CERT_VERIFICATION_FAILED = (
        "SSL certificate verification failed while contacting Microsoft Graph.\n"
        "If you are behind an intercepting proxy, add the --skip-tls flag to your command.\n"
        "Example: intune-role-manager create --skip-tls [other options]"
    )

    SSL_CONNECTION_ERROR = (
        "SSL connection error occurred. If a proxy re-signs TLS traffic, add --skip-tls flag.\n"
        "Original error: {error}"
    )

    CONNECTION_TIMEOUT = (
        "Connection timeout or network error occurred.\n"
        "Try:\n"
        "  - Checking connectivity to graph.microsoft.com\n"
        "  - Retrying the command\n"
        "  - Using --debug flag for more detailed logs"
    )

    CONNECTION_REFUSED = (
        "Connection refused by the remote endpoint.\n"
        "Check proxy settings and the configured graph.base_url."
    )

    UNAUTHORIZED = (
        "Unauthorized (401). Verify that your access token is valid and has not expired. "
        "If passing via shell, ensure correct syntax (zsh/bash: $TOKEN, PowerShell: $env:TOKEN)."
    )

    FORBIDDEN = (
        "Forbidden (403). Your credentials are valid but lack the "
        f"{GraphConstants.REQUIRED_PERMISSION} permission. "
        "Ask a tenant administrator to grant and consent to it."
    )

    MISSING_CREDENTIALS = (
        "No credentials available. Provide --access-token (or GRAPH_ACCESS_TOKEN), "
        "or --tenant-id and --client-id together with the AZURE_CLIENT_SECRET environment variable."
    )

    NAME_CONFLICT = (
        "A role named '{display_name}' already exists (id: {role_id}). "
        "Re-run with --force to delete it before creating the new role."
    )

    BUILT_IN_ROLE = "Role '{display_name}' is a built-in role and cannot be deleted"

    EMPTY_INPUT = "Input file contains no {kind}: {path}"

    UNSUPPORTED_FORMAT = (
        "Unsupported input file extension '{extension}' for {path}. "
        "Supported extensions: {supported}"
    )

    MISSING_COLUMN = "Input file is missing required column '{field}' (found: {found})"

    MISSING_VALUE = "Row {row} has no value for required field '{field}'"

    INPUT_NOT_FOUND = "Input file not found: {path}"

    INPUT_READ_FAILED = "Failed to read input file {path}: {error}"

    CONFIG_FILE_NOT_FOUND = "Configuration file not found: {config_path}"


class FileConstants:
    """File related constants"""

    DEFAULT_CONFIG_FILE = "intune-role-manager-config.yaml"
    INPUT_ENCODING = "utf-8-sig"
