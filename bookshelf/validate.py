"""Validation and parsing of client-supplied book data."""
import json
import re
from typing import Any, Dict, List, Optional, Union

from bookshelf.models import ReadMode

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

_BLOCKING_ALIASES = {"blocking", "sync"}


class MalformedInput(ValueError):
    """Request payload cannot be parsed into the expected shape."""


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def validate_book(candidate: Any) -> List[str]:
    """
    Check a candidate book record.

    Every rule is checked, so the caller can show all problems at once.
    Order is fixed: title, author, summary, publishDate. The date check is
    format only; "2024-13-99" passes.

    Args:
        candidate: Raw mapping with title/author/summary/publishDate keys

    Returns:
        List of violation messages (empty if valid)
    """
    if not isinstance(candidate, dict):
        candidate = {}

    errors = []

    if _is_blank(candidate.get("title")):
        errors.append("Title must not be empty")
    if _is_blank(candidate.get("author")):
        errors.append("Author must not be empty")
    if _is_blank(candidate.get("summary")):
        errors.append("Summary must not be empty")

    publish_date = candidate.get("publishDate")
    if not isinstance(publish_date, str) or not DATE_PATTERN.fullmatch(publish_date):
        errors.append("Publish date must be in YYYY-MM-DD format")

    return errors


def parse_json_object(raw: Union[bytes, str]) -> Dict[str, Any]:
    """
    Decode a request body into a JSON object.

    Args:
        raw: Request body

    Returns:
        Decoded dict

    Raises:
        MalformedInput: body is not valid JSON or not an object
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedInput(f"Invalid JSON payload: {e}") from e

    if not isinstance(data, dict):
        raise MalformedInput("Invalid JSON payload: expected an object")

    return data


def normalize_mode(mode: Optional[Union[str, ReadMode]]) -> ReadMode:
    """Map a requested read mode to ReadMode; unknown or missing means non-blocking."""
    if isinstance(mode, ReadMode):
        return mode
    if isinstance(mode, str) and mode.strip().lower() in _BLOCKING_ALIASES:
        return ReadMode.BLOCKING
    return ReadMode.NON_BLOCKING
