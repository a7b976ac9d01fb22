"""
Intune Role Manager Library

Builds Intune custom role definitions from permission files and creates
them through Microsoft Graph.
"""

__version__ = "1.0.0"

# Core libraries
from .core import GraphAuth, ConfigManager
from .core.exceptions import (
    RoleManagerError, ConfigurationError, InputNotFoundError, EmptyInputError, InputReadError,
    SchemaMismatchError, UnsupportedFormatError, AuthenticationError,
    NameConflictError, RemoteServiceError
)

# Graph libraries
from .graph import GraphRoleClient, RoleDefinitionRequest, RoleHandle, build_role_definition

# Pipeline and main application
from .provisioner import RoleProvisioner, RunStage, ProvisionResult
from .main_app import IntuneRoleManager, main

__all__ = [
    # Core
    'GraphAuth',
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
    # Graph
    'GraphRoleClient',
    'RoleDefinitionRequest',
    'RoleHandle',
    'build_role_definition',
    # Pipeline
    'RoleProvisioner',
    'RunStage',
    'ProvisionResult',
    # Main
    'IntuneRoleManager',
    'main'
]
