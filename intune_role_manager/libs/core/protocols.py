"""
Protocols

Structural interfaces for the collaborators injected into the provisioner
and the main application, so they can be replaced by test doubles.
"""

from typing import Dict, List, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from .auth import GraphSession
    from ..graph.payload import RoleDefinitionRequest, RoleHandle


class AuthProvider(Protocol):
    """Establishes credentials for the role service"""

    def authenticate(self, scopes: Optional[List[str]] = None) -> 'GraphSession':
        ...

    def get_auth_headers(self) -> Dict[str, str]:
        ...


class RoleServiceProvider(Protocol):
    """Role definition lookup, deletion and creation"""

    def find_role_by_display_name(self, display_name: str) -> Optional['RoleHandle']:
        ...

    def delete_role(self, handle: 'RoleHandle') -> None:
        ...

    def create_role(self, request: 'RoleDefinitionRequest') -> 'RoleHandle':
        ...


class ConfigProvider(Protocol):
    """Configuration loading and lookup"""

    def load_config(self, config_path: str) -> Dict:
        ...

    def get_setting(self, key: str):
        ...
