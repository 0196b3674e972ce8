"""Data Loader Module

Parses uploaded CC-CEDICT JSON content into the list of raw entries the
batch runner works on. The top level must be a JSON array; anything else
is a structural error for the whole file.
"""

import json
from pathlib import Path
from typing import Any, List

from .errors import ImportFileError

NOT_AN_ARRAY_MESSAGE = "JSON file must contain an array of vocabulary entries"


def parse_json_entries(content: bytes | str) -> List[Any]:
    """Parse the body of an uploaded JSON file.

    Args:
        content: Raw file body (UTF-8 bytes, BOM allowed) or decoded text

    Returns:
        List of raw entries, in file order

    Raises:
        ImportFileError: If the content is not valid UTF-8 JSON, or its top
            level is not an array
    """
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        data = json.loads(content)
    except UnicodeDecodeError as e:
        raise ImportFileError(f"File is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ImportFileError(f"Invalid JSON file: {e}") from e

    if not isinstance(data, list):
        raise ImportFileError(NOT_AN_ARRAY_MESSAGE)
    return data


def load_raw_entries(path: str | Path) -> List[Any]:
    """Load raw entries from a JSON file on disk.

    Raises:
        FileNotFoundError: If file does not exist
        ImportFileError: If the file is not a JSON array
    """
    path = Path(path)
    return parse_json_entries(path.read_bytes())
