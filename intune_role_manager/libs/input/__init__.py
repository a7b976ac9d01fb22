"""
Input Libraries

Loading, schema validation and permission mapping for role input files.
"""

from .loader import detect_format, load_records, load_lines
from .validator import (
    RecordSchema, ResourceActionRecord, RESOURCE_ACTION_SCHEMA,
    validate_header, validate_records
)
from .mapper import map_actions, map_lines, qualify_action

__all__ = [
    'detect_format',
    'load_records',
    'load_lines',
    'RecordSchema',
    'ResourceActionRecord',
    'RESOURCE_ACTION_SCHEMA',
    'validate_header',
    'validate_records',
    'map_actions',
    'map_lines',
    'qualify_action'
]
