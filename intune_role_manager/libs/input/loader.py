"""
Input Loader

Reads role permission input files. Two formats are supported:

- delimited records (CSV) with a header row, one resource action per row
- line-oriented lists with one resource action token per line and no header
"""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.constants import ErrorMessages, FileConstants, RoleConstants
from ..core.exceptions import (
    EmptyInputError, InputNotFoundError, InputReadError, UnsupportedFormatError
)

logger = logging.getLogger(__name__)

InputFormat = RoleConstants.InputFormat


def _resolve_path(path: Union[str, Path]) -> Path:
    """
    Resolve the input path, failing if it is not an existing file

    Raises:
        InputNotFoundError: If the path does not exist or is not a file
    """
    input_file = Path(path)
    if not input_file.is_file():
        raise InputNotFoundError(ErrorMessages.INPUT_NOT_FOUND.format(path=path))
    return input_file


def detect_format(path: Union[str, Path], override: Optional[str] = None) -> InputFormat:
    """
    Determine the input format from an explicit override or the file extension

    Args:
        path: Input file path
        override: Explicit format name ('csv' or 'lines'), wins over the extension

    Returns:
        InputFormat: Detected format

    Raises:
        UnsupportedFormatError: If the override or extension is not supported
    """
    if override:
        try:
            return InputFormat(override.lower())
        except ValueError:
            supported = ', '.join(str(f) for f in InputFormat)
            raise UnsupportedFormatError(f"Unsupported input format '{override}'. Supported formats: {supported}")

    extension = Path(path).suffix.lower()
    extension_map = InputFormat.extension_map()
    if extension not in extension_map:
        raise UnsupportedFormatError(ErrorMessages.UNSUPPORTED_FORMAT.format(
            extension=extension or '(none)',
            path=path,
            supported=', '.join(sorted(extension_map))
        ))

    input_format = extension_map[extension]
    logger.debug(f"Detected {input_format} input format from extension {extension}")
    return input_format


def load_records(path: Union[str, Path], delimiter: str = RoleConstants.DEFAULT_DELIMITER) -> List[Dict[str, str]]:
    """
    Load delimited records from a file with a header row

    Args:
        path: Input file path
        delimiter: Field delimiter character

    Returns:
        List of row dictionaries keyed by header column name. Rows that are
        shorter than the header carry None for the missing columns.

    Raises:
        InputNotFoundError: If the file does not exist
        InputReadError: If the file cannot be read, decoded or parsed
        EmptyInputError: If the file has no header or no data rows
    """
    input_file = _resolve_path(path)

    try:
        with open(input_file, 'r', encoding=FileConstants.INPUT_ENCODING, newline='') as f:
            reader = csv.DictReader(f, delimiter=delimiter)
            fieldnames = reader.fieldnames
            # Fully blank lines are skipped by DictReader
            rows = [dict(row) for row in reader]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise InputReadError(ErrorMessages.INPUT_READ_FAILED.format(path=path, error=e))

    if not fieldnames or not rows:
        raise EmptyInputError(ErrorMessages.EMPTY_INPUT.format(kind="records", path=path))

    logger.info(f"Loaded {len(rows)} records from {input_file}")
    return rows


def load_lines(path: Union[str, Path]) -> List[str]:
    """
    Load a line-oriented list of resource action tokens

    Line terminators are removed; no other trimming is applied. Blank
    lines are skipped.

    Args:
        path: Input file path

    Returns:
        List of non-blank lines in file order

    Raises:
        InputNotFoundError: If the file does not exist
        InputReadError: If the file cannot be read or decoded
        EmptyInputError: If the file has no non-blank lines
    """
    input_file = _resolve_path(path)

    try:
        with open(input_file, 'r', encoding=FileConstants.INPUT_ENCODING) as f:
            lines = [line.rstrip('\r\n') for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(ErrorMessages.INPUT_READ_FAILED.format(path=path, error=e))

    tokens = [line for line in lines if line.strip()]

    if not tokens:
        raise EmptyInputError(ErrorMessages.EMPTY_INPUT.format(kind="lines", path=path))

    logger.info(f"Loaded {len(tokens)} lines from {input_file}")
    return tokens
