from typing import Optional

from fastapi import Header, Security
from fastapi.security.api_key import APIKeyHeader

from gistblog.settings import Settings, settings

TOKEN_HEADER_NAME = "X-GitHub-Token"
token_header = APIKeyHeader(name=TOKEN_HEADER_NAME, auto_error=False)

_AUTH_SCHEMES = ("token", "bearer")


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_gist_token(
    header_token: Optional[str] = Security(token_header),
    authorization: Optional[str] = Header(default=None),
) -> Optional[str]:
    """
    The caller's GitHub token for this request, or None.

    Missing tokens are not rejected here: reads are anonymous and the gist
    store raises AuthError when a write is attempted without one.
    """
    if header_token and header_token.strip():
        return header_token.strip()
    if authorization:
        scheme, _, value = authorization.strip().partition(" ")
        if scheme.lower() in _AUTH_SCHEMES and value.strip():
            return value.strip()
    return None
