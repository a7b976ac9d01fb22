"""
Role Provisioner

Runs the single forward-only pipeline:

    IDLE -> LOADED -> VALIDATED -> MAPPED -> PAYLOAD_BUILT -> AUTHENTICATED
         -> CONFLICT_CHECKED -> [DELETED] -> CREATED

Any failure moves the run to ABORTED and the error propagates to the caller.
Side effects already performed (such as a successful deletion) are not
rolled back.
"""

import logging
from enum import Enum
from typing import List, NamedTuple, Optional

from .core.constants import ErrorMessages, GraphConstants, RoleConstants
from .core.exceptions import NameConflictError
from .core.protocols import AuthProvider, RoleServiceProvider
from .graph.payload import RoleDefinitionRequest, RoleHandle, build_role_definition
from .input.loader import detect_format, load_lines, load_records
from .input.mapper import map_actions, map_lines
from .input.validator import RESOURCE_ACTION_SCHEMA, validate_records

logger = logging.getLogger(__name__)


class RunStage(str, Enum):
    """Stages of a provisioning run"""
    IDLE = "idle"
    LOADED = "loaded"
    VALIDATED = "validated"
    MAPPED = "mapped"
    PAYLOAD_BUILT = "payload_built"
    AUTHENTICATED = "authenticated"
    CONFLICT_CHECKED = "conflict_checked"
    DELETED = "deleted"
    CREATED = "created"
    ABORTED = "aborted"

    def __str__(self) -> str:
        return self.value


class ProvisionResult(NamedTuple):
    """Outcome of a successful provisioning run"""
    role: RoleHandle
    request: RoleDefinitionRequest
    deleted: Optional[RoleHandle]
    stage: RunStage


class RoleProvisioner:
    """Orchestrates loading, mapping and creating one Intune role definition"""

    def __init__(self, auth_provider: Optional[AuthProvider] = None,
                 role_service: Optional[RoleServiceProvider] = None,
                 prefix: str = RoleConstants.DEFAULT_PREFIX,
                 delimiter: str = RoleConstants.DEFAULT_DELIMITER,
                 scopes: Optional[List[str]] = None):
        """
        Initialize the provisioner

        Args:
            auth_provider: Authenticates against the role service (required for provision())
            role_service: Role lookup/delete/create collaborator (required for provision())
            prefix: Provider prefix for permission identifiers
            delimiter: Field delimiter for delimited input
            scopes: Scopes requested during authentication
        """
        self.auth = auth_provider
        self.role_service = role_service
        self.prefix = prefix
        self.delimiter = delimiter
        self.scopes = scopes or [GraphConstants.DEFAULT_SCOPE]
        self.stage = RunStage.IDLE
        self.history: List[RunStage] = [RunStage.IDLE]

    def _advance(self, stage: RunStage) -> None:
        self.stage = stage
        self.history.append(stage)
        logger.debug(f"Run stage: {stage}")

    def build_request(self, file_path: str, display_name: str, description: str,
                      input_format: Optional[str] = None) -> RoleDefinitionRequest:
        """
        Load, validate and map the input file into a role definition request

        Args:
            file_path: Input file path
            display_name: Role display name
            description: Role description
            input_format: Explicit format ('csv' or 'lines'), detected from the extension if omitted

        Returns:
            RoleDefinitionRequest ready to submit

        Raises:
            RoleManagerError: Any input error; the run is marked ABORTED
        """
        try:
            fmt = detect_format(file_path, input_format)

            if fmt == RoleConstants.InputFormat.LINES:
                lines = load_lines(file_path)
                self._advance(RunStage.LOADED)
                # Line lists have no schema to check
                self._advance(RunStage.VALIDATED)
                actions = map_lines(lines, self.prefix)
            else:
                rows = load_records(file_path, self.delimiter)
                self._advance(RunStage.LOADED)
                records = validate_records(rows, RESOURCE_ACTION_SCHEMA)
                self._advance(RunStage.VALIDATED)
                actions = map_actions(records, self.prefix)
            self._advance(RunStage.MAPPED)

            if not actions:
                logger.warning("No allowed resource actions found; the role will grant no permissions")

            request = build_role_definition(display_name, description, actions)
            self._advance(RunStage.PAYLOAD_BUILT)
            return request
        except Exception:
            self._advance(RunStage.ABORTED)
            raise

    def provision(self, file_path: str, display_name: str, description: str,
                  force: bool = False, input_format: Optional[str] = None) -> ProvisionResult:
        """
        Run the full pipeline and create the role

        Args:
            file_path: Input file path
            display_name: Role display name
            description: Role description
            force: Delete an existing role with the same display name first
            input_format: Explicit input format (optional)

        Returns:
            ProvisionResult describing the created role

        Raises:
            NameConflictError: If the name is taken and force is False
            RoleManagerError: Any other failure; the run is marked ABORTED
        """
        if self.auth is None or self.role_service is None:
            raise ValueError("provision() requires an auth provider and a role service")

        request = self.build_request(file_path, display_name, description, input_format)

        try:
            self.auth.authenticate(self.scopes)
            self._advance(RunStage.AUTHENTICATED)

            existing = self.role_service.find_role_by_display_name(display_name)
            self._advance(RunStage.CONFLICT_CHECKED)

            deleted = None
            if existing is not None:
                if not force:
                    raise NameConflictError(
                        ErrorMessages.NAME_CONFLICT.format(display_name=display_name, role_id=existing.id),
                        display_name=display_name,
                        role_id=existing.id
                    )
                logger.info(f"Deleting existing role '{existing.display_name}' (--force)")
                self.role_service.delete_role(existing)
                deleted = existing
                self._advance(RunStage.DELETED)

            role = self.role_service.create_role(request)
            self._advance(RunStage.CREATED)
        except Exception:
            self._advance(RunStage.ABORTED)
            raise

        return ProvisionResult(role=role, request=request, deleted=deleted, stage=self.stage)
