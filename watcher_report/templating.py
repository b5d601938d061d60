"""Mustache-style variable substitution for report subjects and bodies.

Only variable tags are supported: ``{{name}}`` (HTML-escaped),
``{{{name}}}`` and ``{{& name}}`` (raw). Names are dotted paths resolved
through mappings, object attributes and list indices. Missing values
render as an empty string.
"""

import html
import re
from typing import Any, Dict, Mapping

_MISSING = object()

_TAG_PATTERN = re.compile(
    r"\{\{\{\s*(?P<raw>[^}]+?)\s*\}\}\}"
    r"|\{\{\s*&\s*(?P<amp>[^}]+?)\s*\}\}"
    r"|\{\{\s*(?P<escaped>[^}]+?)\s*\}\}"
)


def _lookup(context: Mapping[str, Any], path: str) -> Any:
    if path == ".":
        return context

    value: Any = context
    for key in path.split("."):
        if isinstance(value, Mapping):
            value = value.get(key, _MISSING)
        elif isinstance(value, (list, tuple)) and key.isdigit():
            index = int(key)
            value = value[index] if index < len(value) else _MISSING
        else:
            value = getattr(value, key, _MISSING)

        if value is _MISSING:
            return None
    return value


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render(template: str, context: Dict[str, Any]) -> str:
    """Render ``template`` against ``context``.

    Example:
        >>> render("Series Report {{payload._id}}", {"payload": {"_id": "abc"}})
        'Series Report abc'
    """
    if not template:
        return ""

    def substitute(match: "re.Match[str]") -> str:
        if match.group("raw") is not None:
            return _stringify(_lookup(context, match.group("raw")))
        if match.group("amp") is not None:
            return _stringify(_lookup(context, match.group("amp")))
        return html.escape(_stringify(_lookup(context, match.group("escaped"))), quote=True)

    return _TAG_PATTERN.sub(substitute, template)
