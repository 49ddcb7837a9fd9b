"""Application configuration — typed views of environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from portal_admin.errors import ConfigurationError

_MIB = 1024 * 1024


def _env(key: str, default: str = "") -> str:
    """Read an environment variable, falling back to ``default``."""
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(_env(key, str(default)))
    except ValueError:
        return default


def _env_bool(key: str, *, default: bool = False) -> bool:
    value = _env(key)
    if not value:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GitHubConfig:
    """Credentials and coordinates of the storage repository."""

    token: str = field(default_factory=lambda: _env("GITHUB_TOKEN"))
    repo: str = field(default_factory=lambda: _env("GITHUB_REPO"))
    branch: str = field(default_factory=lambda: _env("GITHUB_BRANCH", "main"))
    api_url: str = field(default_factory=lambda: _env("GITHUB_API_URL", "https://api.github.com"))
    user_agent: str = field(default_factory=lambda: _env("GITHUB_USER_AGENT", "portal-admin"))
    timeout: float = field(default_factory=lambda: _env_float("GITHUB_TIMEOUT_SECONDS", 30.0))

    def require(self) -> None:
        """Raise ``ConfigurationError`` unless both token and repository are set."""
        missing = [name for name, value in (("GITHUB_TOKEN", self.token), ("GITHUB_REPO", self.repo)) if not value]
        if missing:
            raise ConfigurationError(f"GitHub configuration missing: {', '.join(missing)}")
        if self.repo.count("/") != 1:
            raise ConfigurationError(f"GITHUB_REPO must look like 'owner/name', got {self.repo!r}")


@dataclass(frozen=True)
class StorageConfig:
    """Where collection documents, descriptions and drafts live."""

    backend: str = field(default_factory=lambda: _env("STORAGE_BACKEND", "github").lower())
    local_root: Path = field(default_factory=lambda: Path(_env("STORAGE_LOCAL_ROOT", ".portal/site")))
    root_segment: str = field(default_factory=lambda: _env("STORAGE_ROOT_SEGMENT", "public"))
    careers_path: str = field(
        default_factory=lambda: _env("CAREERS_DOCUMENT_PATH", "public/data/career.json"),
    )
    activities_path: str = field(
        default_factory=lambda: _env("ACTIVITIES_DOCUMENT_PATH", "public/data/activity.json"),
    )
    descriptions_dir: str = field(default_factory=lambda: _env("DESCRIPTIONS_DIR", "public/docs"))
    drafts_dir: Path = field(default_factory=lambda: Path(_env("DRAFTS_DIR", ".portal/drafts")))

    @property
    def is_local(self) -> bool:
        return self.backend == "local"


@dataclass(frozen=True)
class PublishConfig:
    """Retry bounds and pacing for publish runs."""

    max_attempts: int = field(default_factory=lambda: _env_int("PUBLISH_MAX_ATTEMPTS", 3))
    backoff_seconds: float = field(default_factory=lambda: _env_float("PUBLISH_BACKOFF_SECONDS", 2.0))
    write_interval_seconds: float = field(
        default_factory=lambda: _env_float("PUBLISH_WRITE_INTERVAL_SECONDS", 1.0),
    )


@dataclass(frozen=True)
class UploadConfig:
    """Image size limits, in decoded bytes."""

    max_image_bytes: int = field(default_factory=lambda: _env_int("UPLOAD_MAX_IMAGE_BYTES", 4 * _MIB))
    max_compressed_image_bytes: int = field(
        default_factory=lambda: _env_int("UPLOAD_MAX_COMPRESSED_IMAGE_BYTES", 2 * _MIB),
    )
    default_base_folder: str = field(default_factory=lambda: _env("UPLOAD_BASE_FOLDER", "image/social"))


@dataclass(frozen=True)
class EditorConfig:
    """Defaults applied when the editor creates records."""

    first_record_id: int = field(default_factory=lambda: _env_int("FIRST_RECORD_ID", 1))
    career_description_files: bool = field(
        default_factory=lambda: _env_bool("CAREER_DESCRIPTION_FILES", default=False),
    )


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development").lower())
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())
    host: str = field(default_factory=lambda: _env("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class Settings:
    """Aggregate of every configuration section."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    app: AppConfig = field(default_factory=AppConfig)


def load_settings() -> Settings:
    """Load ``.env`` (if present) and build the settings from the environment."""
    load_dotenv()
    return Settings()
