import datetime
import math
import re
from typing import List, Union

_SLUG_STRIP = re.compile(r"[^a-z0-9\u4e00-\u9fa5\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """
    Turn a title into a URL friendly slug.

    Only ASCII letters, digits and CJK ideographs U+4E00..U+9FA5 survive, the
    same character class the existing blog data was built with. Accented
    letters are dropped ("Café" -> "caf") and a title written only in, say,
    Cyrillic yields an empty slug, which callers reject.
    """
    slug = (title or "").lower().strip()
    slug = _SLUG_STRIP.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    return _HYPHENS.sub("-", slug)


def now_utc() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def to_iso(value: datetime.datetime) -> str:
    """Millisecond precision UTC timestamp with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    value = value.astimezone(datetime.timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime.datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def build_filename(timestamp: Union[datetime.datetime, str], slug: str) -> str:
    if isinstance(timestamp, str):
        timestamp = parse_iso(timestamp)
    elif timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
    day = timestamp.astimezone(datetime.timezone.utc)
    return f"{day:%Y-%m-%d}--{slug}.md"


def calculate_reading_time(text: str) -> str:
    words = text.split()
    minutes = math.ceil(len(words) / 200) or 1
    return f"{minutes} min"


def normalize_tags(value) -> List[str]:
    """Coerce a comma separated string or a sequence into clean tag strings."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple, set)):
        return [str(tag).strip() for tag in value if tag is not None and str(tag).strip()]
    return [str(value)]
