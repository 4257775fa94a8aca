import datetime
import json
import logging
from typing import Callable, Dict, List, Optional, Tuple

from gistblog.errors import (
    ConflictError,
    CorruptIndexError,
    NotFoundError,
    ValidationError,
)
from gistblog.repos.gist_repo import TOMBSTONE
from gistblog.schemas.gist import BucketSnapshot
from gistblog.services import front_matter
from gistblog.services.post_query import (
    DRAFT,
    PUBLISHED,
    Page,
    collect_tags,
    filter_posts,
    find_by_slug,
    is_published,
    neighbours,
    paginate,
    sort_by_created_desc,
)
from gistblog.utils import (
    build_filename,
    calculate_reading_time,
    normalize_tags,
    now_utc,
    parse_iso,
    slugify,
    to_iso,
)

logger = logging.getLogger(__name__)

# Fields the caller can never set through an update
PROTECTED_FIELDS = frozenset({"filename", "created_at", "updated_at", "body"})


class PostsService:
    """
    Keeps the gist's index file and its post files in step.

    Every operation re-reads the gist right before changing it and then sends
    the post file and the new index in one PATCH. Two editors writing at the
    same time still race: the last PATCH wins unless ``check_version`` is on,
    in which case the store refuses to write over a newer revision.
    """

    def __init__(
        self,
        store,
        *,
        index_filename: str = "index.json",
        page_size: int = 10,
        description: str = "blog data",
        check_version: bool = False,
        clock: Callable[[], datetime.datetime] = now_utc,
    ):
        self.store = store
        self.index_filename = index_filename
        self.page_size = page_size
        self.description = description
        self.check_version = check_version
        self.clock = clock

    # --- reads ---

    def get_index(self) -> dict:
        _snapshot, index = self._load()
        return index

    def list_posts(self, tag: Optional[str] = None, q: str = "", page: int = 1) -> Page:
        posts = self.get_index()["posts"]
        return paginate(filter_posts(posts, tag=tag, q=q), page, self.page_size)

    def list_all_posts(self) -> List[dict]:
        return sort_by_created_desc(self.get_index()["posts"])

    def list_tags(self) -> List[str]:
        return collect_tags(p for p in self.get_index()["posts"] if is_published(p))

    def get_post(self, slug: str) -> dict:
        snapshot, index = self._load()
        posts = index["posts"]
        found = find_by_slug(posts, slug)
        if not found:
            raise NotFoundError(f"No published post with slug {slug!r}")
        position, record = found
        prev_post, next_post = neighbours(posts, position)
        return {
            **self._with_body(snapshot, record),
            "prev": _link(prev_post),
            "next": _link(next_post),
        }

    def get_post_by_filename(self, filename: str) -> dict:
        snapshot, index = self._load()
        position = _position(index["posts"], filename)
        return self._with_body(snapshot, index["posts"][position])

    def read_post_files(self) -> List[Tuple[str, str]]:
        """Raw text of every indexed post file present in the gist."""
        snapshot, index = self._load()
        files = []
        for record in index["posts"]:
            post_file = snapshot.files.get(record.get("filename"))
            if post_file is None:
                logger.warning(f"Skipping {record.get('filename')}: file missing from the gist")
                continue
            files.append((post_file.filename, self.store.read_file(post_file.raw_url)))
        return files

    # --- writes ---

    def create_post(self, meta: dict, body: str = "") -> dict:
        title = str(meta.get("title") or "").strip()
        if not title:
            raise ValidationError("A post needs a title")
        slug = slugify(meta.get("slug") or title)
        if not slug:
            raise ValidationError(f"Cannot derive a slug from {title!r}")
        status = _status(meta.get("status"))

        now = self.clock()
        stamp = to_iso(now)
        filename = build_filename(now, slug)

        snapshot, index = self._load()
        posts = index["posts"]
        if any(p.get("filename") == filename for p in posts):
            raise ConflictError(f"A post named {filename} already exists")
        if filename in snapshot.files:
            raise ConflictError(f"The gist already holds a file named {filename}")
        if status == PUBLISHED:
            _ensure_unique_slug(posts, slug)

        extra = {k: v for k, v in meta.items() if k not in PROTECTED_FIELDS}
        record = {
            **extra,
            "title": title,
            "slug": slug,
            "summary": str(meta.get("summary") or "").strip(),
            "tags": normalize_tags(meta.get("tags")),
            "status": status,
            "filename": filename,
            "created_at": stamp,
            "updated_at": stamp,
        }
        posts.append(record)

        self._write(
            {
                filename: front_matter.encode(record, body or ""),
                self.index_filename: serialize_index(index),
            },
            snapshot,
            description=snapshot.description or self.description,
        )
        logger.info(f"Created post {filename}")
        return record

    def update_post(
        self, filename: str, changes: dict, body: Optional[str] = None
    ) -> dict:
        snapshot, index = self._load()
        posts = index["posts"]
        position = _position(posts, filename)
        existing = posts[position]

        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}
        if "title" in changes:
            changes["title"] = str(changes["title"] or "").strip()
            if not changes["title"]:
                raise ValidationError("A post needs a title")
        if "slug" in changes:
            changes["slug"] = slugify(changes["slug"] or "")
            if not changes["slug"]:
                raise ValidationError("Slug cannot be empty")
        if "status" in changes:
            changes["status"] = _status(changes["status"])
        if "tags" in changes:
            changes["tags"] = normalize_tags(changes["tags"])

        merged = {**existing, **changes}
        if is_published(merged):
            _ensure_unique_slug(posts, merged.get("slug"), skip=position)
        merged["filename"] = filename
        merged["updated_at"] = self._next_updated_at(existing.get("updated_at"))

        if body is None:
            body = self._current_body(snapshot, filename)
        posts[position] = merged

        self._write(
            {
                filename: front_matter.encode(merged, body),
                self.index_filename: serialize_index(index),
            },
            snapshot,
            description=snapshot.description or self.description,
        )
        logger.info(f"Updated post {filename}")
        return merged

    def delete_post(self, filename: str) -> dict:
        snapshot, index = self._load()
        posts = index["posts"]
        removed = posts.pop(_position(posts, filename))

        mutations: Dict[str, Optional[str]] = {}
        if filename in snapshot.files:
            mutations[filename] = TOMBSTONE
        else:
            logger.warning(f"{filename} is listed in the index but missing from the gist")
        mutations[self.index_filename] = serialize_index(index)

        self._write(mutations, snapshot)
        logger.info(f"Deleted post {filename}")
        return removed

    # --- helpers ---

    def _load(self) -> Tuple[BucketSnapshot, dict]:
        snapshot = self.store.fetch_bucket()
        index_file = snapshot.files.get(self.index_filename)
        if index_file is None:
            logger.warning(
                f"{self.index_filename} not found in gist, starting from an empty index"
            )
            return snapshot, {"posts": []}
        raw = self.store.read_file(index_file.raw_url)
        return snapshot, parse_index(raw, self.index_filename)

    def _write(
        self,
        mutations: Dict[str, Optional[str]],
        snapshot: BucketSnapshot,
        description: Optional[str] = None,
    ) -> BucketSnapshot:
        return self.store.write_batch(
            mutations,
            description=description,
            expected_version=snapshot.version if self.check_version else None,
        )

    def _with_body(self, snapshot: BucketSnapshot, record: dict) -> dict:
        filename = record.get("filename")
        post_file = snapshot.files.get(filename)
        if post_file is None:
            raise NotFoundError(f"Post file {filename} is missing from the gist")
        # front matter may have drifted from the index; only the body is used
        _meta, body = front_matter.decode(self.store.read_file(post_file.raw_url))
        return {**record, "content": body, "readingTime": calculate_reading_time(body)}

    def _current_body(self, snapshot: BucketSnapshot, filename: str) -> str:
        post_file = snapshot.files.get(filename)
        if post_file is None:
            logger.warning(f"{filename} missing from the gist, writing an empty body")
            return ""
        _meta, body = front_matter.decode(self.store.read_file(post_file.raw_url))
        return body

    def _next_updated_at(self, previous) -> str:
        now = self.clock()
        if previous:
            try:
                now = max(now, parse_iso(str(previous)))
            except ValueError:
                logger.warning(f"Ignoring unparseable updated_at {previous!r}")
        return to_iso(now)


def parse_index(raw: str, name: str = "index.json") -> dict:
    try:
        index = json.loads(raw)
    except ValueError as e:
        raise CorruptIndexError(f"{name} is not valid JSON: {e}") from e
    if not isinstance(index, dict):
        raise CorruptIndexError(f"{name} must hold a JSON object")
    posts = index.setdefault("posts", [])
    if not isinstance(posts, list) or not all(isinstance(p, dict) for p in posts):
        raise CorruptIndexError(f"{name} 'posts' must be a list of objects")
    return index


def serialize_index(index: dict) -> str:
    return json.dumps(index, indent=2, ensure_ascii=False)


def _position(posts: List[dict], filename: str) -> int:
    for position, post in enumerate(posts):
        if post.get("filename") == filename:
            return position
    raise NotFoundError(f"No post named {filename}")


def _ensure_unique_slug(posts: List[dict], slug, skip: Optional[int] = None) -> None:
    for position, post in enumerate(posts):
        if position != skip and is_published(post) and post.get("slug") == slug:
            raise ConflictError(
                f"Slug {slug!r} is already used by {post.get('filename')}"
            )


def _status(value) -> str:
    status = value or PUBLISHED
    if status not in (PUBLISHED, DRAFT):
        raise ValidationError(f"Unknown status {status!r}")
    return status


def _link(post: Optional[dict]) -> Optional[dict]:
    if not post:
        return None
    return {"slug": post.get("slug", ""), "title": post.get("title", "")}
