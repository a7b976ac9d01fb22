"""
Tests for the role definition payload and the Microsoft Graph role client.
"""

from unittest.mock import Mock

import pytest
import requests

from intune_role_manager.libs.core.exceptions import AuthenticationError, RemoteServiceError
from intune_role_manager.libs.graph import (
    GraphRoleClient, RoleDefinitionRequest, RoleHandle, build_role_definition
)

from test_constants import CommonTestConstants, TestUtilities


@pytest.fixture
def mock_auth():
    auth = Mock()
    auth.get_auth_headers.return_value = {"Authorization": f"Bearer {CommonTestConstants.ACCESS_TOKEN}"}
    return auth


@pytest.fixture
def mock_session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(mock_auth, mock_session):
    return GraphRoleClient(auth=mock_auth, http_session=mock_session)


class TestPayloadBuilder:
    """Test role definition payload construction"""

    def test_fixed_fields(self):
        # Act
        request = build_role_definition("Reader", "Reads things", ["Microsoft.Intune_Audit_Read"])

        # Assert
        assert request.not_allowed_resource_actions == ()
        assert request.is_built_in is False
        assert request.allowed_resource_actions == ("Microsoft.Intune_Audit_Read",)

    def test_allowed_actions_match_mapper_output(self):
        """Test that the payload keeps exactly the mapped actions"""
        actions = ("Microsoft.Intune_A_Read", "Microsoft.Intune_B_Read", "Microsoft.Intune_A_Read")

        request = build_role_definition("Reader", "", actions)

        assert set(request.allowed_resource_actions) == set(actions)
        assert len(request.allowed_resource_actions) == 2

    def test_request_is_immutable(self):
        request = build_role_definition("Reader", "", [])

        with pytest.raises(AttributeError):
            request.display_name = "Writer"

    def test_graph_payload_shape(self):
        request = build_role_definition("Reader", "Reads things", ["Microsoft.Intune_AndroidFota_Read"])

        payload = request.to_graph_payload()

        assert payload == {
            "@odata.type": "#microsoft.graph.deviceAndAppManagementRoleDefinition",
            "displayName": "Reader",
            "description": "Reads things",
            "isBuiltIn": False,
            "rolePermissions": [
                {
                    "resourceActions": [
                        {
                            "allowedResourceActions": ["Microsoft.Intune_AndroidFota_Read"],
                            "notAllowedResourceActions": [],
                        }
                    ]
                }
            ],
        }

    def test_role_handle_from_graph(self):
        handle = RoleHandle.from_graph({"id": "abc", "displayName": "Reader", "isBuiltIn": True})

        assert handle == RoleHandle(id="abc", display_name="Reader", is_built_in=True)


class TestFindRole:
    """Test role lookup by display name"""

    def test_no_match_returns_none(self, client, mock_session):
        mock_session.request.return_value = TestUtilities.mock_response(200, {"value": []})

        assert client.find_role_by_display_name("Reader") is None

    def test_match_returns_first_handle(self, client, mock_session):
        # Arrange
        mock_session.request.return_value = TestUtilities.mock_response(200, {"value": [
            {"id": "first", "displayName": "Reader", "isBuiltIn": False},
            {"id": "second", "displayName": "Reader", "isBuiltIn": False},
        ]})

        # Act
        handle = client.find_role_by_display_name("Reader")

        # Assert
        assert handle.id == "first"

    def test_filter_query_and_auth_header(self, client, mock_session):
        """Test that the lookup filters on displayName and escapes quotes"""
        mock_session.request.return_value = TestUtilities.mock_response(200, {"value": []})

        client.find_role_by_display_name("Bob's Role")

        args, kwargs = mock_session.request.call_args
        assert args == ("GET", CommonTestConstants.ROLE_DEFINITIONS_URL)
        assert kwargs["params"] == {"$filter": "displayName eq 'Bob''s Role'"}
        assert kwargs["headers"]["Authorization"].startswith("Bearer ")
        assert kwargs["timeout"] == 30

    def test_v1_api_version(self, mock_auth, mock_session):
        client = GraphRoleClient(auth=mock_auth, api_version="v1.0", http_session=mock_session)

        assert client.role_definitions_url == "https://graph.microsoft.com/v1.0/deviceManagement/roleDefinitions"

    def test_forbidden_maps_to_authentication_error(self, client, mock_session):
        mock_session.request.return_value = TestUtilities.mock_response(
            403, {"error": {"code": "Forbidden", "message": "Insufficient privileges"}}
        )

        with pytest.raises(AuthenticationError) as exc_info:
            client.find_role_by_display_name("Reader")

        assert "DeviceManagementRBAC.ReadWrite.All" in str(exc_info.value)

    def test_unauthorized_maps_to_authentication_error(self, client, mock_session):
        mock_session.request.return_value = TestUtilities.mock_response(401, text="")

        with pytest.raises(AuthenticationError) as exc_info:
            client.find_role_by_display_name("Reader")

        assert "401" in str(exc_info.value)

    def test_connection_error_maps_to_remote_service_error(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.ConnectionError("Max retries exceeded")

        with pytest.raises(RemoteServiceError) as exc_info:
            client.find_role_by_display_name("Reader")

        assert "Failed to look up role 'Reader'" in str(exc_info.value)


class TestDeleteRole:
    """Test role deletion"""

    def test_delete_issues_delete_request(self, client, mock_session):
        mock_session.request.return_value = TestUtilities.mock_response(204, text="")

        client.delete_role(RoleHandle("abc", "Reader"))

        args, _ = mock_session.request.call_args
        assert args == ("DELETE", f"{CommonTestConstants.ROLE_DEFINITIONS_URL}/abc")

    def test_already_deleted_is_success(self, client, mock_session):
        """Test that deletion is idempotent from the caller's perspective"""
        mock_session.request.return_value = TestUtilities.mock_response(404, text="")

        client.delete_role(RoleHandle("abc", "Reader"))

    def test_built_in_role_is_refused(self, client, mock_session):
        with pytest.raises(RemoteServiceError) as exc_info:
            client.delete_role(RoleHandle("abc", "Help Desk Operator", is_built_in=True))

        assert "built-in" in str(exc_info.value)
        mock_session.request.assert_not_called()

    def test_server_error(self, client, mock_session):
        mock_session.request.return_value = TestUtilities.mock_response(
            500, {"error": {"code": "InternalError", "message": "boom"}}
        )

        with pytest.raises(RemoteServiceError) as exc_info:
            client.delete_role(RoleHandle("abc", "Reader"))

        assert exc_info.value.status_code == 500
        assert "InternalError: boom" in str(exc_info.value)


class TestCreateRole:
    """Test role creation"""

    def test_create_posts_payload(self, client, mock_session):
        # Arrange
        request = build_role_definition("Reader", "Reads", ["Microsoft.Intune_Audit_Read"])
        mock_session.request.return_value = TestUtilities.mock_response(
            201, {"id": CommonTestConstants.ROLE_ID, "displayName": "Reader", "isBuiltIn": False}
        )

        # Act
        handle = client.create_role(request)

        # Assert
        assert handle.id == CommonTestConstants.ROLE_ID
        args, kwargs = mock_session.request.call_args
        assert args == ("POST", CommonTestConstants.ROLE_DEFINITIONS_URL)
        assert kwargs["json"] == request.to_graph_payload()

    def test_bad_request_raises_remote_service_error(self, client, mock_session):
        request = build_role_definition("Reader", "", ["Microsoft.Intune_Bogus"])
        mock_session.request.return_value = TestUtilities.mock_response(
            400, {"error": {"code": "BadRequest", "message": "Invalid resource action"}}
        )

        with pytest.raises(RemoteServiceError) as exc_info:
            client.create_role(request)

        assert exc_info.value.status_code == 400
        assert "Failed to create role 'Reader'" in str(exc_info.value)

    def test_timeout_raises_remote_service_error(self, client, mock_session):
        mock_session.request.side_effect = requests.exceptions.Timeout("Read timed out")

        with pytest.raises(RemoteServiceError):
            client.create_role(build_role_definition("Reader", "", []))


class TestSessionLifecycle:
    """Test HTTP session ownership"""

    def test_injected_session_is_not_closed(self, client, mock_session):
        client.close()

        mock_session.close.assert_not_called()

    def test_skip_tls_disables_verification(self, mock_auth, mock_session):
        GraphRoleClient(auth=mock_auth, skip_tls=True, http_session=mock_session)

        assert mock_session.verify is False

    def test_invalid_base_url(self, mock_auth, mock_session):
        from intune_role_manager.libs.core.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            GraphRoleClient(auth=mock_auth, base_url="graph.microsoft.com", http_session=mock_session)
