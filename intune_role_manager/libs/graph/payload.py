"""
Payload Builder

Immutable role definition request and its Microsoft Graph JSON rendering.
"""

from typing import Any, Dict, Iterable, NamedTuple, Tuple

from ..core.constants import GraphConstants


class RoleDefinitionRequest(NamedTuple):
    """Role definition to be created; built once and consumed once"""
    display_name: str
    description: str
    allowed_resource_actions: Tuple[str, ...]
    not_allowed_resource_actions: Tuple[str, ...] = ()
    is_built_in: bool = False

    def to_graph_payload(self) -> Dict[str, Any]:
        """Render the request body for POST deviceManagement/roleDefinitions"""
        return {
            '@odata.type': GraphConstants.ROLE_DEFINITION_ODATA_TYPE,
            'displayName': self.display_name,
            'description': self.description,
            'isBuiltIn': self.is_built_in,
            'rolePermissions': [
                {
                    'resourceActions': [
                        {
                            'allowedResourceActions': list(self.allowed_resource_actions),
                            'notAllowedResourceActions': list(self.not_allowed_resource_actions),
                        }
                    ]
                }
            ],
        }


class RoleHandle(NamedTuple):
    """Reference to a role definition that exists in the service"""
    id: str
    display_name: str
    is_built_in: bool = False

    @classmethod
    def from_graph(cls, data: Dict[str, Any]) -> 'RoleHandle':
        """Build a handle from a Graph roleDefinition resource"""
        return cls(
            id=data.get('id', ''),
            display_name=data.get('displayName', ''),
            is_built_in=bool(data.get('isBuiltIn', False)),
        )


def build_role_definition(display_name: str, description: str,
                          allowed_resource_actions: Iterable[str]) -> RoleDefinitionRequest:
    """
    Assemble the role definition request

    Args:
        display_name: Role display name
        description: Role description
        allowed_resource_actions: Permission identifiers from the action mapper

    Returns:
        RoleDefinitionRequest with no denied actions that is not built-in
    """
    return RoleDefinitionRequest(
        display_name=display_name,
        description=description,
        allowed_resource_actions=tuple(dict.fromkeys(allowed_resource_actions)),
        not_allowed_resource_actions=(),
        is_built_in=False,
    )
