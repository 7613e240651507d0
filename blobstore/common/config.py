from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

ADDRESSING_STYLES: tuple[str, ...] = ("path", "virtual", "auto")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Connection settings for one S3-compatible blob store target.

    Required values may be left empty here; ``BlobStore.from_settings``
    rejects an incomplete configuration before any client is built.
    """

    S3_ENDPOINT: str = ""
    S3_SECURE: bool = True
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_BUCKET: str = ""
    S3_REGION: str | None = None
    S3_OBJECT_PREFIX: str = ""
    S3_ADDRESSING_STYLE: str = "path"
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        style = (self.S3_ADDRESSING_STYLE or "").strip().lower()
        if style not in ADDRESSING_STYLES:
            raise ValueError(
                f"S3_ADDRESSING_STYLE must be one of {', '.join(ADDRESSING_STYLES)}."
            )
        if self.LOG_LEVEL.upper() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}.")

    @property
    def endpoint_url(self) -> str:
        """Endpoint as a URL, honouring ``S3_SECURE`` when no scheme is given."""
        endpoint = self.S3_ENDPOINT.strip().rstrip("/")
        if "://" in endpoint:
            return endpoint
        scheme = "https" if self.S3_SECURE else "http"
        return f"{scheme}://{endpoint}"

    def missing_required(self) -> list[str]:
        required = {
            "S3_ENDPOINT": self.S3_ENDPOINT,
            "S3_ACCESS_KEY": self.S3_ACCESS_KEY,
            "S3_SECRET_KEY": self.S3_SECRET_KEY,
            "S3_BUCKET": self.S3_BUCKET,
        }
        return [name for name, value in required.items() if not value.strip()]

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            S3_ENDPOINT=os.environ.get("S3_ENDPOINT", cls.S3_ENDPOINT),
            S3_SECURE=_as_bool(os.environ.get("S3_SECURE"), cls.S3_SECURE),
            S3_ACCESS_KEY=os.environ.get("S3_ACCESS_KEY", cls.S3_ACCESS_KEY),
            S3_SECRET_KEY=os.environ.get("S3_SECRET_KEY", cls.S3_SECRET_KEY),
            S3_BUCKET=os.environ.get("S3_BUCKET", cls.S3_BUCKET),
            S3_REGION=_as_optional(os.environ.get("S3_REGION")),
            S3_OBJECT_PREFIX=os.environ.get("S3_OBJECT_PREFIX", cls.S3_OBJECT_PREFIX),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
