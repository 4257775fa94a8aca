from typing import Optional

from fastapi import Depends

from gistblog.repos.gist_repo import GistStore
from gistblog.security import get_gist_token, get_settings
from gistblog.services.posts_service import PostsService
from gistblog.settings import Settings


def get_gist_store(
    token: Optional[str] = Depends(get_gist_token),
    current_settings: Settings = Depends(get_settings),
):
    store = GistStore(
        current_settings.GIST_ID,
        token=token,
        api_url=current_settings.GITHUB_API_URL,
    )
    try:
        yield store
    finally:
        store.close()


def get_posts_service(
    store=Depends(get_gist_store),
    current_settings: Settings = Depends(get_settings),
):
    return build_posts_service(store, current_settings)


def build_posts_service(store, current_settings: Settings) -> PostsService:
    return PostsService(
        store,
        index_filename=current_settings.INDEX_FILENAME,
        page_size=current_settings.PAGE_SIZE,
        description=current_settings.GIST_DESCRIPTION,
        check_version=current_settings.GIST_CHECK_VERSION,
    )
