"""Move posts between local Markdown files and the gist."""

import datetime
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import frontmatter

from gistblog.services.posts_service import PostsService
from gistblog.utils import normalize_tags

logger = logging.getLogger(__name__)

_DATED_STEM = re.compile(r"^\d{4}-\d{2}-\d{2}--")


def collect_markdown_files(paths: Iterable[Path]) -> List[Path]:
    files = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(path.glob("*.md")))
        elif path.suffix.lower() == ".md":
            files.append(path)
        else:
            logger.warning(f"Skipping {path}: not a Markdown file")
    return files


def load_markdown(path: Path) -> Tuple[dict, str]:
    """Read a local post with YAML front matter into (meta, body)."""
    post = frontmatter.load(str(path))
    metadata = post.metadata or {}

    status = metadata.get("status") or "published"
    if metadata.get("draft") is True:
        status = "draft"

    meta = {
        "title": _derive_title(metadata, path.stem),
        "slug": str(metadata.get("slug") or ""),
        "summary": _as_text(metadata.get("summary") or metadata.get("description")),
        "tags": normalize_tags(metadata.get("tags")),
        "status": str(status),
    }
    return meta, post.content


def import_files(
    service: Optional[PostsService], paths: Iterable[Path], dry_run: bool = False
) -> List[dict]:
    """Create one post per file. Stops at the first failure."""
    created = []
    for path in collect_markdown_files(paths):
        meta, body = load_markdown(path)
        if dry_run:
            logger.info(f"Would import {path} as {meta['title']!r}")
            created.append(meta)
            continue
        record = service.create_post(meta, body)
        logger.info(f"Imported {path} -> {record['filename']}")
        created.append(record)
    return created


def export_posts(service: PostsService, target: Path) -> List[Path]:
    """Write every post file in the gist, front matter included, into target."""
    target.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, text in service.read_post_files():
        destination = target / Path(filename).name
        destination.write_text(text, encoding="utf-8")
        written.append(destination)
    logger.info(f"Exported {len(written)} post(s) to {target}")
    return written


def _derive_title(metadata: dict, stem: str) -> str:
    if metadata and metadata.get("title"):
        return str(metadata["title"])
    clean_stem = _DATED_STEM.sub("", stem)
    clean_stem = clean_stem.replace("-", " ").replace("_", " ")
    return clean_stem.title()


def _as_text(value) -> str:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value or "")
