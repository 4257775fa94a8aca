"""
Front matter codec for post files.

A post file is a small header block followed by the Markdown body:

    ---
    title: Hello World
    slug: hello-world
    tags: [python, "a, b"]
    summary: First post
    created_at: 2024-03-05T10:00:00.000Z
    updated_at: 2024-03-05T10:00:00.000Z
    status: published
    ---
    Body text...

The header is a restricted grammar, not YAML: one ``key: value`` per line,
values are plain strings except list fields, which are bracketed and comma
separated with items either bare or JSON double-quoted. The index file stays
the source of truth for metadata; only the body is trusted from here.
"""

import datetime
import json
import logging
import re
from typing import Dict, List, Tuple

from gistblog.utils import to_iso

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "title",
    "slug",
    "tags",
    "summary",
    "created_at",
    "updated_at",
    "status",
)
LIST_FIELDS = frozenset({"tags"})
DELIMITER = "---"

_HEADER = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)
_BARE_ITEM = re.compile(r'[^\s,\[\]"](?:[^,\[\]"\r\n]*[^\s,\[\]"])?')
_LINE_BREAKS = re.compile(r"[\r\n]+")
_JSON = json.JSONDecoder()


def encode(meta: dict, body: str) -> str:
    """Render metadata and body into post file text. Deterministic."""
    lines = [DELIMITER]
    for field in HEADER_FIELDS:
        value = meta.get(field)
        if field in LIST_FIELDS:
            lines.append(f"{field}: {_format_list(value)}")
        elif field == "status":
            lines.append(f"{field}: {_format_scalar(value) or 'published'}")
        else:
            lines.append(f"{field}: {_format_scalar(value)}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n" + (body or "")


def decode(text: str) -> Tuple[Dict[str, object], str]:
    """
    Split post file text into (metadata, body).

    Text without a leading header block comes back unchanged as the body with
    empty metadata. A list field that does not match the list grammar is kept
    as its raw string.
    """
    text = text or ""
    match = _HEADER.match(text)
    if not match:
        return {}, text

    meta: Dict[str, object] = {}
    # only \n ends a header line, values may hold U+2028, \x0c and the like
    for line in (match.group(1) or "").split("\n"):
        line = line.rstrip("\r")
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if key in LIST_FIELDS:
            try:
                meta[key] = parse_list(value)
            except ValueError as e:
                logger.debug(f"Keeping raw value for {key!r}: {e}")
                meta[key] = value
        else:
            meta[key] = value
    return meta, text[match.end() :]


def parse_list(value: str) -> List[str]:
    """Parse ``[a, "b, c", d]``. Raises ValueError on anything else."""
    if not (value.startswith("[") and value.endswith("]")):
        raise ValueError("list value must be wrapped in brackets")
    inner = value[1:-1]
    if not inner.strip():
        return []

    items: List[str] = []
    pos, end = 0, len(inner)
    while True:
        pos = _skip_blanks(inner, pos)
        if pos < end and inner[pos] == '"':
            item, pos = _JSON.raw_decode(inner, pos)
            if not isinstance(item, str):
                raise ValueError("quoted list item is not a string")
            pos = _skip_blanks(inner, pos)
        else:
            comma = inner.find(",", pos)
            stop = end if comma == -1 else comma
            item = inner[pos:stop].strip()
            if not _BARE_ITEM.fullmatch(item):
                raise ValueError(f"invalid list item {item!r}")
            pos = stop
        items.append(item)
        if pos == end:
            return items
        if inner[pos] != ",":
            raise ValueError(f"unexpected {inner[pos]!r} in list")
        pos += 1


def _skip_blanks(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t":
        pos += 1
    return pos


def _format_scalar(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime.datetime):
        return to_iso(value)
    return _LINE_BREAKS.sub(" ", str(value)).strip()


def _format_list(values) -> str:
    if isinstance(values, str):
        values = [values]
    return "[" + ", ".join(_format_item(str(v)) for v in (values or [])) + "]"


def _format_item(item: str) -> str:
    if _BARE_ITEM.fullmatch(item):
        return item
    return json.dumps(item, ensure_ascii=False)
