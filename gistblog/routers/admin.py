import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from gistblog import dependencies as deps
from gistblog.errors import BlogError
from gistblog.routers.posts import http_error
from gistblog.schemas.blog import PostCreate, PostDetail, PostSummary, PostUpdate
from gistblog.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


@router.get("/posts", response_model=List[PostSummary])
def list_all_posts(service: PostsService = Depends(deps.get_posts_service)):
    """Every post including drafts, newest first."""
    try:
        return service.list_all_posts()
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{filename}", response_model=PostDetail)
def get_post_for_edit(
    filename: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return service.get_post_by_filename(filename)
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.post("/posts", response_model=PostSummary, status_code=201)
def create_post(
    request: PostCreate,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return service.create_post(request.meta(), request.body)
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error creating post {request.title!r}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create post")


@router.put("/posts/{filename}", response_model=PostSummary)
def update_post(
    filename: str,
    request: PostUpdate,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Update a post in place; its filename never changes."""
    try:
        return service.update_post(filename, request.changes(), body=request.body)
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error updating post {filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update post")


@router.delete("/posts/{filename}")
def delete_post(
    filename: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        service.delete_post(filename)
        return {"deleted": filename}
    except BlogError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting post {filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete post")
