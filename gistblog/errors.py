from typing import Optional


class BlogError(Exception):
    """Base class for every error raised by the blog core."""


class TransportError(BlogError):
    """The request never produced a response (DNS, connect, read failure)."""


class RemoteError(BlogError):
    def __init__(self, status: int, message: str):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.message = message


class AuthError(BlogError):
    """Missing or rejected GitHub token."""


class NotFoundError(BlogError):
    pass


class ConflictError(BlogError):
    pass


class ValidationError(BlogError):
    pass


class CorruptIndexError(BlogError):
    """The index file exists but is not a JSON object with a posts list."""


_HTTP_STATUS = {
    ValidationError: 400,
    AuthError: 401,
    NotFoundError: 404,
    ConflictError: 409,
}


def http_status_for(error: BlogError) -> int:
    for error_type, status in _HTTP_STATUS.items():
        if isinstance(error, error_type):
            return status
    # upstream failures (remote, transport, corrupt index)
    return 502


def describe(error: BlogError) -> str:
    if isinstance(error, AuthError):
        return (
            f"{error}. Provide a GitHub token with the 'gist' scope "
            "in the X-GitHub-Token header."
        )
    return str(error)


def remote_message(body, fallback: Optional[str] = None) -> str:
    """Pull the human readable message out of a GitHub error payload."""
    if isinstance(body, dict):
        return str(body.get("message") or body)
    if isinstance(body, str) and body:
        return body
    return fallback or "no response body"
