"""
Action Mapper

Turns validated input into fully-qualified permission identifiers by
prefixing each allowed resource action with the provider namespace.
"""

import logging
from typing import Iterable, Tuple

from ..core.constants import RoleConstants
from .validator import ResourceActionRecord

logger = logging.getLogger(__name__)


def qualify_action(resource_action: str, prefix: str = RoleConstants.DEFAULT_PREFIX) -> str:
    """Build '{prefix}_{resource_action}' without normalizing the action"""
    return f"{prefix}{RoleConstants.PREFIX_SEPARATOR}{resource_action}"


def _unique(actions: Iterable[str]) -> Tuple[str, ...]:
    """De-duplicate while keeping first-seen order"""
    return tuple(dict.fromkeys(actions))


def map_actions(records: Iterable[ResourceActionRecord],
                prefix: str = RoleConstants.DEFAULT_PREFIX) -> Tuple[str, ...]:
    """
    Map validated records to permission identifiers

    Only records whose Allowed column was "Yes" are kept. An empty tuple is
    returned when nothing is allowed.

    Args:
        records: Validated records
        prefix: Provider prefix

    Returns:
        Tuple of unique permission identifiers in input order
    """
    records = list(records)
    actions = _unique(qualify_action(r.resource_action, prefix) for r in records if r.allowed)
    logger.info(f"Mapped {len(actions)} allowed resource actions from {len(records)} records")
    return actions


def map_lines(lines: Iterable[str], prefix: str = RoleConstants.DEFAULT_PREFIX) -> Tuple[str, ...]:
    """
    Map a line-oriented list to permission identifiers; every line is allowed

    Args:
        lines: Non-blank resource action tokens
        prefix: Provider prefix

    Returns:
        Tuple of unique permission identifiers in input order
    """
    actions = _unique(qualify_action(line, prefix) for line in lines)
    logger.info(f"Mapped {len(actions)} resource actions from line list")
    return actions
