"""
Graph Role Client

Handles communication with the Microsoft Graph Intune role definition
endpoints: lookup by display name, deletion and creation.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
import urllib3

from ..core.auth import GraphAuth
from ..core.constants import ErrorMessages, GraphConstants, NetworkConstants
from ..core.exceptions import RemoteServiceError
from ..core.utils import escape_odata_string, handle_api_error, handle_network_error, validate_url
from .payload import RoleDefinitionRequest, RoleHandle

logger = logging.getLogger(__name__)


class GraphRoleClient:
    """Client for Intune role definitions in Microsoft Graph"""

    def __init__(self, auth: GraphAuth, base_url: str = GraphConstants.DEFAULT_BASE_URL,
                 api_version: str = GraphConstants.DEFAULT_API_VERSION,
                 timeout: int = NetworkConstants.DEFAULT_TIMEOUT, skip_tls: bool = False,
                 http_session: Optional[requests.Session] = None):
        """
        Initialize the Graph role client

        Args:
            auth: Authenticated GraphAuth providing request headers
            base_url: Microsoft Graph base URL
            api_version: Graph API version segment ('v1.0' or 'beta')
            timeout: Request timeout in seconds
            skip_tls: Skip TLS certificate verification
            http_session: requests.Session to use (optional, created if omitted)
        """
        validate_url(base_url, "Graph base URL")
        self.auth = auth
        self.base_url = base_url.rstrip('/')
        self.api_version = str(api_version)
        self.timeout = timeout
        self._owns_session = http_session is None
        self.session = http_session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': NetworkConstants.USER_AGENT,
        })

        if skip_tls:
            self.session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def __enter__(self) -> 'GraphRoleClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session if this client created it"""
        if self._owns_session:
            self.session.close()

    @property
    def role_definitions_url(self) -> str:
        return f"{self.base_url}/{self.api_version}/{GraphConstants.ROLE_DEFINITIONS_PATH}"

    def _request(self, method: str, url: str, context: str, **kwargs) -> requests.Response:
        """
        Issue an authenticated request

        Raises:
            RemoteServiceError: On transport failures
        """
        headers = dict(kwargs.pop('headers', {}) or {})
        headers.update(self.auth.get_auth_headers())

        logger.debug(f"{method} {url}")
        try:
            return self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            handle_network_error(e, context, RemoteServiceError)

    def find_roles_by_display_name(self, display_name: str) -> List[Dict[str, Any]]:
        """
        List role definitions whose display name matches

        Matching follows the service's $filter 'eq' semantics.

        Args:
            display_name: Display name to look up

        Returns:
            List of raw roleDefinition resources
        """
        context = f"Failed to look up role '{display_name}'"
        params = {'$filter': f"displayName eq '{escape_odata_string(display_name)}'"}

        response = self._request('GET', self.role_definitions_url, context, params=params)
        if response.status_code != NetworkConstants.HTTPStatus.OK:
            handle_api_error(response, context)

        try:
            return response.json().get('value', [])
        except (ValueError, AttributeError):
            raise RemoteServiceError(f"{context}: response is not a JSON collection",
                                     status_code=response.status_code)

    def find_role_by_display_name(self, display_name: str) -> Optional[RoleHandle]:
        """
        Look up a role definition by display name

        Args:
            display_name: Display name to look up

        Returns:
            RoleHandle of the first match, or None when no role matches
        """
        matches = self.find_roles_by_display_name(display_name)
        if not matches:
            logger.info(f"No existing role named '{display_name}'")
            return None

        if len(matches) > 1:
            logger.warning(f"{len(matches)} roles named '{display_name}' found, using the first")

        handle = RoleHandle.from_graph(matches[0])
        logger.info(f"Found existing role '{handle.display_name}' (id: {handle.id})")
        return handle

    def delete_role(self, handle: RoleHandle) -> None:
        """
        Delete a role definition; an already-deleted role counts as success

        Args:
            handle: Role to delete

        Raises:
            RemoteServiceError: If the role is built-in or the service rejects the deletion
        """
        if handle.is_built_in:
            raise RemoteServiceError(ErrorMessages.BUILT_IN_ROLE.format(display_name=handle.display_name))

        context = f"Failed to delete role '{handle.display_name}'"
        url = f"{self.role_definitions_url}/{handle.id}"

        response = self._request('DELETE', url, context)
        if response.status_code == NetworkConstants.HTTPStatus.NOT_FOUND:
            logger.info(f"Role {handle.id} was already deleted")
            return
        if response.status_code not in (NetworkConstants.HTTPStatus.OK, NetworkConstants.HTTPStatus.NO_CONTENT):
            handle_api_error(response, context)

        logger.info(f"Deleted role '{handle.display_name}' (id: {handle.id})")

    def create_role(self, request: RoleDefinitionRequest) -> RoleHandle:
        """
        Create a role definition

        Args:
            request: Role definition to submit

        Returns:
            RoleHandle of the created role

        Raises:
            RemoteServiceError: If the service rejects the request
        """
        context = f"Failed to create role '{request.display_name}'"

        response = self._request('POST', self.role_definitions_url, context,
                                 json=request.to_graph_payload())
        if response.status_code not in (NetworkConstants.HTTPStatus.OK, NetworkConstants.HTTPStatus.CREATED):
            handle_api_error(response, context)

        try:
            handle = RoleHandle.from_graph(response.json())
        except (ValueError, AttributeError):
            raise RemoteServiceError(f"{context}: response is not a JSON object",
                                     status_code=response.status_code)

        logger.info(f"Created role '{handle.display_name}' (id: {handle.id})")
        return handle
