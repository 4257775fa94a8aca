from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Gist
    GIST_ID: str = ""
    GITHUB_API_URL: str = "https://api.github.com"
    INDEX_FILENAME: str = "index.json"
    GIST_DESCRIPTION: str = "blog data"
    GIST_CHECK_VERSION: bool = False

    # Only the CLI reads this; the API takes the token from each request
    GITHUB_TOKEN: str = ""

    # Site
    OWNER: str = ""
    SITE_TITLE: str = "My Gist Blog"
    SITE_DESC: str = "A blog stored in a GitHub Gist"
    PAGE_SIZE: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
