from typing import Dict, Optional

from pydantic import BaseModel, Field


class GistFile(BaseModel):
    filename: str
    raw_url: str
    size: Optional[int] = None
    truncated: bool = False


class BucketSnapshot(BaseModel):
    """The gist as seen by one GET: its files and the revision they belong to."""

    id: Optional[str] = None
    description: Optional[str] = None
    files: Dict[str, GistFile] = Field(default_factory=dict)
    version: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, payload: dict) -> "BucketSnapshot":
        files = {}
        for name, entry in (payload.get("files") or {}).items():
            # GitHub reports deleted-in-this-PATCH files as null
            if not entry:
                continue
            files[name] = GistFile(
                filename=entry.get("filename") or name,
                raw_url=entry.get("raw_url") or "",
                size=entry.get("size"),
                truncated=bool(entry.get("truncated", False)),
            )
        history = payload.get("history") or []
        version = history[0].get("version") if history else None
        return cls(
            id=payload.get("id"),
            description=payload.get("description"),
            files=files,
            version=version,
            updated_at=payload.get("updated_at"),
        )
