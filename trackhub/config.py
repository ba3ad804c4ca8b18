"""Service configuration, read once at startup from the environment."""

import logging
import os
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from trackhub.sync import GitHubStore, InMemoryStore, RemoteStore

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings for the trackhub service.

    Values come from environment variables (case-insensitive) or a ``.env``
    file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Remote repository
    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    github_branch: str = "main"
    github_api_url: str = "https://api.github.com"
    github_timeout: float = 30.0
    backend: Literal["github", "memory"] = Field(
        default="github",
        validation_alias=AliasChoices("trackhub_backend", "backend"),
    )

    # Local storage
    mirror_root: str = Field(default_factory=os.getcwd)
    records_dir: str = "records"
    static_dir: Optional[str] = None

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    max_body_bytes: int = 5 * 1024 * 1024
    log_level: str = "INFO"

    def missing_github_settings(self) -> list[str]:
        """Names of the GitHub variables the github backend still needs."""
        required = {
            "GITHUB_TOKEN": self.github_token,
            "GITHUB_OWNER": self.github_owner,
            "GITHUB_REPO": self.github_repo,
        }
        return [name for name, value in required.items() if not value]


def build_store(settings: Settings) -> RemoteStore:
    """Create the remote store selected by ``settings.backend``."""
    if settings.backend == "memory":
        logger.info("Using in-memory remote store; nothing will be persisted remotely")
        return InMemoryStore(default_ref=settings.github_branch)

    missing = settings.missing_github_settings()
    if missing:
        logger.warning(
            f"Warning: {', '.join(missing)} not set. "
            "API will fail until configured."
        )
    return GitHubStore(
        owner=settings.github_owner,
        repo=settings.github_repo,
        token=settings.github_token,
        branch=settings.github_branch,
        api_url=settings.github_api_url,
        timeout=settings.github_timeout,
    )
