import datetime
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from gistblog.utils import parse_iso

PUBLISHED = "published"
DRAFT = "draft"
ALL_TAGS = "all"

_EPOCH = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


@dataclass
class Page:
    items: List[dict] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total: int = 0
    page_size: int = 10


def is_published(post: dict) -> bool:
    return post.get("status") == PUBLISHED


def sort_by_created_desc(posts: Iterable[dict]) -> List[dict]:
    # sorted() is stable with reverse=True, so ties keep index order
    return sorted(posts, key=_created_key, reverse=True)


def filter_posts(
    posts: Iterable[dict], tag: Optional[str] = None, q: str = ""
) -> List[dict]:
    """Published posts matching tag and free text, newest first."""
    needle = (q or "").strip().lower()
    matches = []
    for post in posts:
        if not is_published(post):
            continue
        tags = _tags(post)
        if tag and tag != ALL_TAGS and tag not in tags:
            continue
        if needle and needle not in _search_text(post, tags):
            continue
        matches.append(post)
    return sort_by_created_desc(matches)


def paginate(items: List[dict], page: int, page_size: int) -> Page:
    page_size = max(1, page_size)
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=items[start : start + page_size],
        page=page,
        total_pages=total_pages,
        total=total,
        page_size=page_size,
    )


def find_by_slug(posts: List[dict], slug: str) -> Optional[Tuple[int, dict]]:
    for position, post in enumerate(posts):
        if post.get("slug") == slug and is_published(post):
            return position, post
    return None


def neighbours(
    posts: List[dict], position: int
) -> Tuple[Optional[dict], Optional[dict]]:
    """
    Nearest published entries before and after ``position`` in storage order.

    Display filters and sorting play no part; drafts are stepped over so a
    link never points at a post the public detail route would refuse.
    """
    prev_post = next(
        (p for p in reversed(posts[:position]) if is_published(p)), None
    )
    next_post = next((p for p in posts[position + 1 :] if is_published(p)), None)
    return prev_post, next_post


def collect_tags(posts: Iterable[dict]) -> List[str]:
    seen = {}
    for post in posts:
        for tag in _tags(post):
            seen.setdefault(tag, None)
    return list(seen)


def _tags(post: dict) -> List[str]:
    tags = post.get("tags") or []
    if isinstance(tags, str):
        return [tags]
    return [str(t) for t in tags]


def _search_text(post: dict, tags: List[str]) -> str:
    return f"{post.get('title') or ''} {post.get('summary') or ''} {' '.join(tags)}".lower()


def _created_key(post: dict) -> datetime.datetime:
    value = post.get("created_at")
    if not value:
        return _EPOCH
    try:
        return parse_iso(str(value))
    except ValueError:
        return _EPOCH
