"""Parameter encoding: path substitution, query multi-maps, content negotiation."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from urllib.parse import quote


def parameter_to_string(value: Any) -> str:
    """Render a single parameter value the way the service expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return parameter_to_string(value.value)
    return str(value)


def parameter_to_multimap(wire_name: str, value: Any) -> list[tuple[str, str]]:
    """Expand a query value into (key, value) pairs.

    Sequences become repeated entries under the same key, in order.
    """
    if isinstance(value, (list, tuple)):
        return [(wire_name, parameter_to_string(item)) for item in value if item is not None]
    return [(wire_name, parameter_to_string(value))]


def expand_path(template: str, values: dict[str, Any]) -> str:
    """Replace each {wire-name} placeholder with its URL-quoted value."""
    path = template
    for wire_name, value in values.items():
        path = path.replace("{" + wire_name + "}", quote(parameter_to_string(value), safe=""))
    return path


def select_content_type(content_types: tuple[str, ...] | list[str]) -> str | None:
    if not content_types:
        return None
    return content_types[0]


def select_accept(accepts: tuple[str, ...] | list[str]) -> str | None:
    if not accepts:
        return None
    return ",".join(accepts)
