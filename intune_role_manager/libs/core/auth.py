"""
Authentication Module

Handles Microsoft Graph authentication: either a pre-issued bearer token or
an OAuth2 client credentials exchange against the Microsoft identity platform.
"""

import logging
import os
import time
from typing import Dict, List, NamedTuple, Optional

import requests

from .constants import EnvironmentVariables, ErrorMessages, GraphConstants, NetworkConstants
from .exceptions import AuthenticationError, ConfigurationError
from .utils import handle_network_error, mask_sensitive_info, validate_url, extract_graph_error

logger = logging.getLogger(__name__)


class GraphSession(NamedTuple):
    """Credentials established by a successful authentication"""
    access_token: str
    token_type: str = "Bearer"
    expires_at: Optional[float] = None
    scopes: tuple = ()

    def authorization_header(self) -> Dict[str, str]:
        """Return the Authorization header for Graph requests"""
        return {'Authorization': f'{self.token_type} {self.access_token}'}

    def is_expired(self, skew: int = 60) -> bool:
        """Check whether the token expires within `skew` seconds"""
        if self.expires_at is None:
            return False
        return time.time() + skew >= self.expires_at


class GraphAuth:
    """Handles Microsoft Graph authentication"""

    def __init__(self, access_token: str = None, tenant_id: str = None, client_id: str = None,
                 client_secret: str = None, authority: str = GraphConstants.DEFAULT_AUTHORITY,
                 skip_tls: bool = False, timeout: int = NetworkConstants.DEFAULT_TIMEOUT,
                 http_session: Optional[requests.Session] = None):
        """
        Initialize Graph authentication handler

        Args:
            access_token: Pre-issued bearer token (optional)
            tenant_id: Azure AD tenant ID for client credentials (optional)
            client_id: App registration client ID for client credentials (optional)
            client_secret: App registration secret for client credentials (optional)
            authority: Identity platform authority URL
            skip_tls: Whether to skip TLS verification for token requests
            timeout: Token request timeout in seconds
            http_session: requests.Session to use for the token exchange (optional)
        """
        self.access_token = access_token
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.authority = authority.rstrip('/')
        self.skip_tls = skip_tls
        self.timeout = timeout
        self.http_session = http_session
        self.session: Optional[GraphSession] = None

    @classmethod
    def from_environment(cls, access_token: str = None, tenant_id: str = None, client_id: str = None,
                         **kwargs) -> 'GraphAuth':
        """
        Build a GraphAuth, filling unset credentials from environment variables

        Explicit arguments take precedence over the environment. The client
        secret is only ever read from the environment.
        """
        return cls(
            access_token=access_token or os.getenv(EnvironmentVariables.ACCESS_TOKEN),
            tenant_id=tenant_id or os.getenv(EnvironmentVariables.TENANT_ID),
            client_id=client_id or os.getenv(EnvironmentVariables.CLIENT_ID),
            client_secret=os.getenv(EnvironmentVariables.CLIENT_SECRET),
            **kwargs
        )

    def authenticate(self, scopes: Optional[List[str]] = None) -> GraphSession:
        """
        Establish credentials with privilege to manage RBAC role definitions

        Args:
            scopes: Scopes to request (defaults to the Graph '.default' scope)

        Returns:
            GraphSession: Established credentials

        Raises:
            AuthenticationError: If no credentials are available or the exchange fails
        """
        scopes = list(scopes or [GraphConstants.DEFAULT_SCOPE])

        if self.access_token:
            logger.info("Using provided access token for Microsoft Graph authentication")
            self.session = GraphSession(access_token=self.access_token, scopes=tuple(scopes))
            return self.session

        if self.tenant_id and self.client_id and self.client_secret:
            self.session = self._acquire_client_credentials_token(scopes)
            return self.session

        if self.tenant_id or self.client_id:
            missing = [name for name, value in (
                ('tenant ID', self.tenant_id),
                ('client ID', self.client_id),
                (f'client secret ({EnvironmentVariables.CLIENT_SECRET})', self.client_secret),
            ) if not value]
            raise AuthenticationError(
                f"Incomplete client credentials, missing: {', '.join(missing)}"
            )

        raise AuthenticationError(ErrorMessages.MISSING_CREDENTIALS)

    def _token_endpoint(self) -> str:
        """Build the OAuth2 v2.0 token endpoint URL for the tenant"""
        try:
            validate_url(self.authority, "authority URL")
        except ConfigurationError as e:
            raise AuthenticationError(str(e))
        return f"{self.authority}/{self.tenant_id}/oauth2/v2.0/token"

    def _acquire_client_credentials_token(self, scopes: List[str]) -> GraphSession:
        """
        Exchange client credentials for an access token

        Raises:
            AuthenticationError: If the token request fails or returns no token
        """
        token_url = self._token_endpoint()
        data = {
            'grant_type': str(GraphConstants.GrantType.CLIENT_CREDENTIALS),
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'scope': ' '.join(scopes),
        }

        logger.info(f"Requesting access token for client {self.client_id} in tenant {self.tenant_id}")
        http = self.http_session or requests.Session()
        try:
            response = http.post(token_url, data=data, timeout=self.timeout, verify=not self.skip_tls)
        except requests.RequestException as e:
            handle_network_error(e, "Token request failed", AuthenticationError)
        finally:
            if self.http_session is None:
                http.close()

        if response.status_code != NetworkConstants.HTTPStatus.OK:
            detail = mask_sensitive_info(extract_graph_error(response), secret=self.client_secret)
            raise AuthenticationError(
                f"Token request failed with status {response.status_code}: {detail}"
            )

        try:
            payload = response.json()
        except ValueError:
            raise AuthenticationError("Token endpoint returned a non-JSON response")

        access_token = payload.get('access_token')
        if not access_token:
            raise AuthenticationError("Token endpoint response did not contain an access_token")

        expires_in = payload.get('expires_in')
        expires_at = time.time() + int(expires_in) if expires_in else None

        logger.info("Successfully acquired Microsoft Graph access token")
        logger.debug(f"Token: {mask_sensitive_info(access_token, token=access_token)}")

        return GraphSession(
            access_token=access_token,
            token_type=payload.get('token_type', 'Bearer'),
            expires_at=expires_at,
            scopes=tuple(scopes),
        )

    def get_auth_headers(self) -> Dict[str, str]:
        """
        Get authentication headers for HTTP requests

        Returns:
            Dict containing authorization headers

        Raises:
            AuthenticationError: If authenticate() has not succeeded yet
        """
        if not self.is_authenticated():
            raise AuthenticationError("Not authenticated - call authenticate() first")
        return self.session.authorization_header()

    def is_authenticated(self) -> bool:
        """
        Check if authentication is properly configured

        Returns:
            bool: True if authenticated
        """
        return self.session is not None
