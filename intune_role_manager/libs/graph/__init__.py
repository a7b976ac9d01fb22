"""
Graph Libraries

Role definition payloads and the Microsoft Graph role definition client.
"""

from .payload import RoleDefinitionRequest, RoleHandle, build_role_definition
from .client import GraphRoleClient

__all__ = [
    'RoleDefinitionRequest',
    'RoleHandle',
    'build_role_definition',
    'GraphRoleClient'
]
