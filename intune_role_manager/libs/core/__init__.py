"""
Core Libraries

Shared functionality and utilities for the Intune Role Manager tool.
"""

from .auth import GraphAuth, GraphSession
from .config import ConfigManager
from .exceptions import (
    RoleManagerError, ConfigurationError, InputNotFoundError, EmptyInputError, InputReadError,
    SchemaMismatchError, UnsupportedFormatError, AuthenticationError,
    NameConflictError, RemoteServiceError
)
from .utils import setup_logging, disable_ssl_warnings, mask_sensitive_info

__all__ = [
    'GraphAuth',
    'GraphSession',
    'ConfigManager',
    'RoleManagerError',
    'ConfigurationError',
    'InputNotFoundError',
    'EmptyInputError',
    'InputReadError',
    'SchemaMismatchError',
    'UnsupportedFormatError',
    'AuthenticationError',
    'NameConflictError',
    'RemoteServiceError',
    'setup_logging',
    'disable_ssl_warnings',
    'mask_sensitive_info'
]
