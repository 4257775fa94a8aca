import datetime
import json

from gistblog.errors import ValidationError
from gistblog.schemas.gist import BucketSnapshot, GistFile
from gistblog.services.post_query import Page


def raw_url(name: str) -> str:
    return f"https://gist.githubusercontent.com/raw/{name}"


class FakeGistStore:
    """
    In-memory gist: a dict of filename -> text.
    Every write_batch applies all mutations together and bumps the version.
    """

    def __init__(self, files: dict | None = None, description: str = "blog data"):
        self.files = dict(files or {})
        self.description = description
        self.version = 1
        self.batches = []
        self.fetches = 0
        self.reads = []

    @classmethod
    def with_index(cls, posts, bodies: dict | None = None, **extra_fields):
        files = {"index.json": json.dumps({**extra_fields, "posts": posts}, indent=2)}
        files.update(bodies or {})
        return cls(files)

    def snapshot(self) -> BucketSnapshot:
        return BucketSnapshot(
            id="gist-1",
            description=self.description,
            files={
                name: GistFile(filename=name, raw_url=raw_url(name))
                for name in self.files
            },
            version=f"v{self.version}",
        )

    def fetch_bucket(self) -> BucketSnapshot:
        self.fetches += 1
        return self.snapshot()

    def read_file(self, locator: str) -> str:
        self.reads.append(locator)
        name = locator.rsplit("/", 1)[-1]
        return self.files[name]

    def write_batch(self, mutations, description=None, expected_version=None):
        if not mutations:
            raise ValidationError("empty batch")
        self.batches.append(
            {
                "mutations": dict(mutations),
                "description": description,
                "expected_version": expected_version,
            }
        )
        for name, content in mutations.items():
            if content is None:
                self.files.pop(name, None)
            else:
                self.files[name] = content
        self.version += 1
        return self.snapshot()

    def index(self) -> dict:
        return json.loads(self.files["index.json"])


class FakeClock:
    """Returns start, start + step, start + 2*step, ..."""

    def __init__(
        self,
        start=datetime.datetime(2024, 3, 5, 10, 0, tzinfo=datetime.timezone.utc),
        step=datetime.timedelta(minutes=1),
    ):
        self.current = start
        self.step = step

    def __call__(self) -> datetime.datetime:
        value = self.current
        self.current = self.current + self.step
        return value


def make_record(filename: str, slug: str, **fields) -> dict:
    record = {
        "title": fields.pop("title", slug.replace("-", " ").title()),
        "slug": slug,
        "summary": "",
        "tags": [],
        "status": "published",
        "filename": filename,
        "created_at": "2024-01-01T00:00:00.000Z",
        "updated_at": "2024-01-01T00:00:00.000Z",
    }
    record.update(fields)
    return record


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(
        self,
        page=None,
        post=None,
        posts=None,
        tags=None,
        error: Exception | None = None,
    ):
        self.page = page or Page()
        self.post = post
        self.posts = posts or []
        self.tags = tags or []
        self.error = error
        self.calls = []

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def list_posts(self, tag=None, q="", page=1):
        self.calls.append(("list_posts", tag, q, page))
        self._maybe_fail()
        return self.page

    def get_post(self, slug):
        self.calls.append(("get_post", slug))
        self._maybe_fail()
        return self.post

    def list_tags(self):
        self._maybe_fail()
        return self.tags

    def list_all_posts(self):
        self._maybe_fail()
        return self.posts

    def get_post_by_filename(self, filename):
        self.calls.append(("get_post_by_filename", filename))
        self._maybe_fail()
        return self.post

    def create_post(self, meta, body=""):
        self.calls.append(("create_post", meta, body))
        self._maybe_fail()
        return {**meta, "filename": f"2024-03-05--{meta.get('slug') or 'x'}.md"}

    def update_post(self, filename, changes, body=None):
        self.calls.append(("update_post", filename, changes, body))
        self._maybe_fail()
        return {**self.post, **changes} if self.post else {"filename": filename, "slug": "x", **changes}

    def delete_post(self, filename):
        self.calls.append(("delete_post", filename))
        self._maybe_fail()
        return {"filename": filename}
