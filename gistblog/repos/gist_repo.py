import logging
from typing import Mapping, Optional

import httpx

from gistblog.errors import (
    AuthError,
    ConflictError,
    RemoteError,
    TransportError,
    ValidationError,
    remote_message,
)
from gistblog.schemas.gist import BucketSnapshot

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github+json"
# A None value in a write batch deletes the file
TOMBSTONE = None


class GistStore:
    """
    Thin client for one gist used as a file bucket.

    Reads are anonymous. Writes go through a single PATCH so that every file
    of a batch is committed together or not at all. The token belongs to the
    caller that built this store and is only ever sent as a request header.
    """

    def __init__(
        self,
        gist_id: str,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        client: Optional[httpx.Client] = None,
    ):
        if not gist_id:
            raise ValueError("GIST_ID must be set to use GistStore")
        self.gist_id = gist_id
        self.token = token or None
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.Client(follow_redirects=True)

    @property
    def gist_url(self) -> str:
        return f"{self.api_url}/gists/{self.gist_id}"

    def fetch_bucket(self) -> BucketSnapshot:
        response = self._send("GET", self.gist_url, headers={"Accept": ACCEPT_HEADER})
        return BucketSnapshot.from_api(_json(response))

    def read_file(self, locator: str) -> str:
        return self._send("GET", locator).text

    def write_batch(
        self,
        mutations: Mapping[str, Optional[str]],
        description: Optional[str] = None,
        expected_version: Optional[str] = None,
    ) -> BucketSnapshot:
        if not mutations:
            raise ValidationError("A write batch needs at least one file")
        if not self.token:
            raise AuthError("A GitHub token is required to write to the gist")

        if expected_version is not None:
            current = self.fetch_bucket()
            if current.version != expected_version:
                raise ConflictError(
                    f"Gist changed since it was read "
                    f"(expected {expected_version}, found {current.version})"
                )

        files = {
            name: TOMBSTONE if content is None else {"content": content}
            for name, content in mutations.items()
        }
        payload = {"files": files}
        if description is not None:
            payload["description"] = description

        logger.info(f"Writing {len(files)} file(s) to gist {self.gist_id}: {sorted(files)}")
        response = self._send(
            "PATCH",
            self.gist_url,
            json=payload,
            headers={
                "Accept": ACCEPT_HEADER,
                "Authorization": f"token {self.token}",
            },
        )
        return BucketSnapshot.from_api(_json(response))

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.is_success:
            return response

        status = response.status_code
        message = remote_message(_body(response), response.reason_phrase)
        credentialed = "Authorization" in (kwargs.get("headers") or {})
        if credentialed and status in (401, 403):
            logger.warning(f"{method} {url} rejected the token (HTTP {status})")
            raise AuthError(f"GitHub rejected the token (HTTP {status}: {message})")
        logger.warning(f"{method} {url} returned HTTP {status}: {message}")
        raise RemoteError(status, message)


def _body(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


def _json(response: httpx.Response) -> dict:
    try:
        payload = response.json()
    except ValueError as e:
        raise RemoteError(response.status_code, "Response is not valid JSON") from e
    if not isinstance(payload, dict):
        raise RemoteError(response.status_code, "Unexpected response shape")
    return payload
