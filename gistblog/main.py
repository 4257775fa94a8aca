import logging

from fastapi import FastAPI

from gistblog.routers import admin, posts
from gistblog.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Gist Blog API", description="A blog stored in a GitHub Gist")

app.include_router(posts.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    return {
        "message": "Gist Blog API is running",
        "site": {
            "title": settings.SITE_TITLE,
            "description": settings.SITE_DESC,
            "owner": settings.OWNER,
        },
    }
