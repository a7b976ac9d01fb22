"""
Schema Validator

Checks raw delimited records against a static schema declaration and turns
them into immutable ResourceActionRecord values. Validation is fail-fast:
the first nonconforming record aborts the whole operation.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from ..core.constants import ErrorMessages, RoleConstants
from ..core.exceptions import SchemaMismatchError

logger = logging.getLogger(__name__)

Column = RoleConstants.Column


class RecordSchema(NamedTuple):
    """Expected column layout of the delimited input format"""
    required: Tuple[str, ...]
    optional: Tuple[str, ...] = ()
    # Required fields whose value must also be non-blank
    non_empty: Tuple[str, ...] = ()


RESOURCE_ACTION_SCHEMA = RecordSchema(
    required=(str(Column.RESOURCE_ACTION), str(Column.ALLOWED)),
    optional=(str(Column.DESCRIPTION),),
    non_empty=(str(Column.RESOURCE_ACTION),),
)


class ResourceActionRecord(NamedTuple):
    """One validated row of input"""
    resource_action: str
    allowed: bool
    description: Optional[str] = None


def parse_allowed(token: str, row: int = 0) -> bool:
    """
    Interpret an Allowed token

    Only a case-insensitive "Yes" grants the action. Tokens other than
    Yes/No, including an empty cell, are treated as not allowed and logged
    as a warning.
    """
    normalized = token.strip().lower()
    if normalized == RoleConstants.ALLOWED_TOKEN:
        return True
    if normalized != RoleConstants.DENIED_TOKEN:
        logger.warning(f"Row {row}: unrecognized Allowed value '{token}', treating as 'No'")
    return False


def validate_header(fieldnames: Sequence[Optional[str]], schema: RecordSchema = RESOURCE_ACTION_SCHEMA) -> None:
    """
    Check a set of column names against the schema

    Args:
        fieldnames: Column names exposed by a record
        schema: Expected schema

    Raises:
        SchemaMismatchError: Naming the first missing required column, or
            reporting values beyond the header columns
    """
    if None in fieldnames:
        raise SchemaMismatchError(
            "Record has more values than header columns", field=None
        )

    present = set(fieldnames)
    for field in schema.required:
        if field not in present:
            raise SchemaMismatchError(
                ErrorMessages.MISSING_COLUMN.format(field=field, found=', '.join(fieldnames) or '(none)'),
                field=field
            )

    known = set(schema.required) | set(schema.optional)
    extra = [name for name in fieldnames if name not in known]
    if extra:
        logger.debug(f"Ignoring extra columns: {', '.join(extra)}")


def validate_records(rows: Iterable[Dict[str, Optional[str]]],
                     schema: RecordSchema = RESOURCE_ACTION_SCHEMA) -> List[ResourceActionRecord]:
    """
    Validate raw rows and convert them into ResourceActionRecord values

    Row numbers in error messages are 1-based data rows (the header is row 0).

    Args:
        rows: Raw row dictionaries from the loader
        schema: Expected schema

    Returns:
        List of validated records in input order

    Raises:
        SchemaMismatchError: On the first row that does not conform
    """
    records = []
    header_checked = None

    for index, row in enumerate(rows, 1):
        fieldnames = tuple(row.keys())
        if fieldnames != header_checked:
            try:
                validate_header(fieldnames, schema)
            except SchemaMismatchError as e:
                raise SchemaMismatchError(f"Row {index}: {e}", field=e.field, row=index)
            header_checked = fieldnames

        for field in schema.required:
            value = row.get(field)
            if value is None or (field in schema.non_empty and not value.strip()):
                raise SchemaMismatchError(
                    ErrorMessages.MISSING_VALUE.format(row=index, field=field),
                    field=field,
                    row=index
                )

        records.append(ResourceActionRecord(
            resource_action=row[str(Column.RESOURCE_ACTION)],
            allowed=parse_allowed(row[str(Column.ALLOWED)], index),
            description=row.get(str(Column.DESCRIPTION)),
        ))

    logger.debug(f"Validated {len(records)} records")
    return records
