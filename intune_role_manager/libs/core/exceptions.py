"""
Exceptions Module

Error taxonomy for the Intune Role Manager tool. Every error is fatal: the
command-line layer reports it and exits with a non-zero status.
"""

from typing import Optional


class RoleManagerError(Exception):
    """Base exception for all Intune Role Manager errors"""
    pass


class ConfigurationError(RoleManagerError):
    """Raised when configuration or command-line values are invalid"""
    pass


class InputNotFoundError(RoleManagerError, FileNotFoundError):
    """Raised when the input path does not resolve to an existing file"""
    pass


class EmptyInputError(RoleManagerError):
    """Raised when the input file yields zero records or lines"""
    pass


class InputReadError(RoleManagerError):
    """Raised when the input file exists but cannot be read or decoded"""
    pass


class SchemaMismatchError(RoleManagerError):
    """Raised when a delimited record does not match the expected schema"""

    def __init__(self, message: str, field: Optional[str] = None, row: Optional[int] = None):
        super().__init__(message)
        self.field = field
        self.row = row


class UnsupportedFormatError(RoleManagerError):
    """Raised when the input file extension is not a supported format"""
    pass


class AuthenticationError(RoleManagerError):
    """Raised when credentials cannot be obtained or are rejected"""
    pass


class NameConflictError(RoleManagerError):
    """Raised when a role with the same display name exists and force was not requested"""

    def __init__(self, message: str, display_name: str, role_id: Optional[str] = None):
        super().__init__(message)
        self.display_name = display_name
        self.role_id = role_id


class RemoteServiceError(RoleManagerError):
    """Raised for any non-success response or transport failure from Microsoft Graph"""

    def __init__(self, message: str, status_code: Optional[int] = None, response_text: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text
