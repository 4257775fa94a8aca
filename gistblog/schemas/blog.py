from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gistblog import utils

PostStatus = Literal["published", "draft"]


class PostSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    filename: str
    slug: str = ""
    title: str = ""
    summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: str = "published"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return utils.normalize_tags(value)


class PostLink(BaseModel):
    model_config = ConfigDict(extra="ignore")

    slug: str = ""
    title: str = ""


class PostDetail(PostSummary):
    content: str
    readingTime: Optional[str] = None
    prev: Optional[PostLink] = None
    next: Optional[PostLink] = None


class PostPage(BaseModel):
    items: List[PostSummary] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total: int = 0
    page_size: int = 10


class PostCreate(BaseModel):
    title: str = Field(min_length=1)
    slug: Optional[str] = None
    summary: str = ""
    tags: List[str] = Field(default_factory=list)
    status: PostStatus = "published"
    body: str = ""

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return utils.normalize_tags(value)

    def meta(self) -> dict:
        return self.model_dump(exclude={"body"})


class PostUpdate(BaseModel):
    """Partial update; fields left out keep their stored value."""

    title: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    body: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return None if value is None else utils.normalize_tags(value)

    def changes(self) -> dict:
        return self.model_dump(exclude={"body"}, exclude_unset=True, exclude_none=True)
