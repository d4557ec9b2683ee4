"""Configuration loading and validation."""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from imgsync.errors import ConfigError

# Cloudinary rejects non-final chunks smaller than this
MIN_PART_SIZE = 5 * 1024 * 1024


class GitHubConfig(BaseModel):
    """Coordinates of the source folder in a GitHub repository."""

    owner: str
    repo: str
    path: str = "images"
    token: str | None = None
    ref: str | None = None
    api_url: str = "https://api.github.com"
    timeout: int = 10

    @field_validator("path")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Normalize '/images/' to 'images'."""
        return v.strip("/")

    @field_validator("token", "ref", mode="before")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        return v or None


class CloudinaryConfig(BaseModel):
    """Cloudinary account credentials and destination folder."""

    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = "github-images"


class TransformConfig(BaseModel):
    """Fixed resize/crop/format recipe applied to every upload."""

    width: int = 800
    height: int = 600
    crop: str = "fill"
    format: str = "webp"

    @field_validator("width", "height")
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("dimensions must be positive")
        return v

    @field_validator("format")
    @classmethod
    def normalize_format(cls, v: str) -> str:
        return v.lower().lstrip(".")


class SyncConfig(BaseModel):
    """Everything a sync run needs, built once at process start."""

    cloudinary: CloudinaryConfig
    github: GitHubConfig | None = None
    transform: TransformConfig = TransformConfig()
    extensions: list[str] = ["jpg", "jpeg", "png", "gif", "webp"]
    part_size: int = 6_000_000
    read_size: int = 64 * 1024
    timeout: int = 30

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case and drop leading dots: ['.JPG'] -> ['jpg']."""
        normalized = [ext.lower().lstrip(".") for ext in v if ext.strip(".")]
        if not normalized:
            raise ValueError("at least one extension is required")
        return normalized

    @field_validator("part_size")
    @classmethod
    def part_size_minimum(cls, v: int) -> int:
        if v < MIN_PART_SIZE:
            raise ValueError(f"part_size must be at least {MIN_PART_SIZE} bytes")
        return v

    def require_github(self) -> GitHubConfig:
        """The GitHub section, which only local uploads may omit."""
        if self.github is None:
            raise ConfigError("GitHub source is not configured (set GITHUB_OWNER and GITHUB_REPO)")
        return self.github


# Environment variable -> (section, field)
ENV_VARS: dict[str, tuple[str, str]] = {
    "CLOUDINARY_CLOUD_NAME": ("cloudinary", "cloud_name"),
    "CLOUDINARY_API_KEY": ("cloudinary", "api_key"),
    "CLOUDINARY_API_SECRET": ("cloudinary", "api_secret"),
    "GITHUB_OWNER": ("github", "owner"),
    "GITHUB_REPO": ("github", "repo"),
    "GITHUB_TOKEN": ("github", "token"),
    "GITHUB_FOLDER": ("github", "path"),
}
OPTIONAL_ENV_VARS = {"GITHUB_TOKEN", "GITHUB_FOLDER"}
GITHUB_ENV_VARS = {"GITHUB_OWNER", "GITHUB_REPO", "GITHUB_TOKEN", "GITHUB_FOLDER"}
_UNSET_VAR = re.compile(r"\$\{?\w+\}?")


def _expand(value: Any) -> Any:
    """
    Expand environment variables in every string of a YAML tree.

    A value that is only a reference to an unset variable becomes None.
    """
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if _UNSET_VAR.fullmatch(expanded):
            return None
        return expanded
    if isinstance(value, dict):
        return {k: _expand(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand(v) for v in value]
    return value


def _build(data: dict[str, Any], source: str) -> SyncConfig:
    try:
        return SyncConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {source}:\n{e}") from e


def load_config(config_path: Path) -> SyncConfig:
    """Load sync configuration from a YAML file."""
    with open(config_path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    return _build(_expand(data), str(config_path))


def load_config_from_env(
    environ: Mapping[str, str] | None = None,
    require_github: bool = True,
) -> SyncConfig:
    """
    Build sync configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)
        require_github: If False, GitHub variables may be absent (local uploads)

    Returns:
        Validated SyncConfig

    Raises:
        ConfigError: If any required variable is unset or empty
    """
    if environ is None:
        environ = os.environ

    optional = OPTIONAL_ENV_VARS if require_github else OPTIONAL_ENV_VARS | GITHUB_ENV_VARS
    missing = [name for name in ENV_VARS if name not in optional and not environ.get(name)]
    if missing:
        raise ConfigError(f"Missing environment variables: {', '.join(missing)}")

    data: dict[str, dict[str, str]] = {"cloudinary": {}}
    for name, (section, key) in ENV_VARS.items():
        value = environ.get(name)
        if value:
            data.setdefault(section, {})[key] = value

    github = data.get("github", {})
    if not require_github and not (github.get("owner") and github.get("repo")):
        data.pop("github", None)

    return _build(data, "environment")
