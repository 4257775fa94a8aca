import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from gistblog import dependencies as deps
from gistblog.errors import BlogError, describe, http_status_for
from gistblog.schemas.blog import PostDetail, PostPage
from gistblog.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter()


def http_error(error: BlogError) -> HTTPException:
    status = http_status_for(error)
    if status >= 500:
        logger.error(f"Gist request failed: {error}")
    return HTTPException(status_code=status, detail=describe(error))


@router.get("/posts", response_model=PostPage)
def list_posts(
    tag: Optional[str] = Query(None, description="Exact tag, or 'all'"),
    q: str = Query("", description="Substring of title, summary or tags"),
    page: int = Query(1, description="1-indexed, clamped to the last page"),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Published posts, newest first, one page at a time."""
    try:
        result = service.list_posts(tag=tag, q=q, page=page)
        return PostPage(
            items=result.items,
            page=result.page,
            total_pages=result.total_pages,
            total=result.total,
            page_size=result.page_size,
        )
    except HTTPException:
        raise
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug}", response_model=PostDetail)
def get_post(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single published post by slug, with its neighbours."""
    try:
        return service.get_post(slug)
    except HTTPException:
        raise
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.get("/tags", response_model=List[str])
def list_tags(service: PostsService = Depends(deps.get_posts_service)):
    try:
        return service.list_tags()
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error listing tags: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve tags")
