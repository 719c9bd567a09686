"""
Console output helpers: field filtering of API responses and rendering.
"""

import json
from typing import Any, Dict, Optional, Sequence

from rich.console import Console

_MISSING = object()


def get_field(data: Any, field: str) -> Any:
    """Look up a possibly dotted field (``commit.sha``); None if absent."""
    current = data
    for part in field.split("."):
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else _MISSING
        else:
            current = _MISSING
        if current is _MISSING:
            return None
    return current


def filter_fields(data: Any, fields: Optional[Sequence[str]], as_json: bool = False) -> Any:
    """
    Reduce an API response to the requested fields.

    Args:
        data: Decoded JSON response
        fields: Field names (dotted paths allowed); empty keeps everything
        as_json: Keep a dict even when a single field is requested

    Returns:
        The data unchanged without fields, the bare value for a single field
        (unless ``as_json``), otherwise a dict of the requested fields. Lists
        are filtered element by element.
    """
    if not fields or data is None:
        return data
    if isinstance(data, list):
        return [filter_fields(item, fields, as_json) for item in data]
    if len(fields) == 1 and not as_json:
        return get_field(data, fields[0])
    result: Dict[str, Any] = {}
    for field in fields:
        result[field] = get_field(data, field)
    return result


def render_result(console: Console, result: Any, as_json: bool = False) -> None:
    """Print a filtered result: scalars as plain text, containers as JSON."""
    if isinstance(result, (dict, list)) or as_json:
        console.print_json(json.dumps(result, default=str))
    elif result is None:
        console.print("null", highlight=False)
    else:
        console.print(str(result), highlight=False, markup=False, soft_wrap=True)
