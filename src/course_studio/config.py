"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

DEFAULT_ALLOWED_HOSTS = ("localhost", "127.0.0.1", "minio")
RELAY_UPLOAD_PATH = "/internal/upload-proxy"

_WILDCARD_HOSTS = ("0.0.0.0", "::")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_bool(key: str, default: bool) -> bool:
    raw = _env(key).strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    raw = _env(key).strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def parse_host_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated host list, dropping blanks."""
    return tuple(host.strip() for host in raw.split(",") if host.strip())


def default_relay_url() -> str:
    """Upload endpoint of a relay running with this environment's RELAY_HOST and RELAY_PORT."""
    host = _env("RELAY_HOST", "127.0.0.1")
    if host in _WILDCARD_HOSTS:
        host = "127.0.0.1"
    elif ":" in host:
        host = f"[{host}]"
    port = _env_int("RELAY_PORT", 3000)
    return f"http://{host}:{port}{RELAY_UPLOAD_PATH}"


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = field(
        default_factory=lambda: _env("COURSE_STUDIO_API_URL", "http://localhost:8080/api")
    )
    organization_id: str = field(default_factory=lambda: _env("COURSE_STUDIO_ORG_ID"))
    timeout_seconds: float = field(
        default_factory=lambda: float(_env_int("COURSE_STUDIO_TIMEOUT_SECONDS", 30))
    )


@dataclass(frozen=True)
class UploadConfig:
    direct_enabled: bool = field(default_factory=lambda: _env_bool("UPLOAD_DIRECT_ENABLED", True))
    # An absolute path here means the relay is served from the API's own origin.
    relay_url: str = field(
        default_factory=lambda: _env("UPLOAD_RELAY_URL") or default_relay_url()
    )
    chunk_size: int = field(default_factory=lambda: _env_int("UPLOAD_CHUNK_SIZE", 1024 * 1024))
    timeout_seconds: float = field(
        default_factory=lambda: float(_env_int("UPLOAD_TIMEOUT_SECONDS", 300))
    )


@dataclass(frozen=True)
class RelayConfig:
    allowed_hosts_raw: str = field(default_factory=lambda: _env("UPLOAD_PROXY_ALLOWED_HOSTS"))
    host: str = field(default_factory=lambda: _env("RELAY_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("RELAY_PORT", 3000))

    @property
    def allowed_hosts(self) -> tuple[str, ...]:
        """Configured allow-list, or the local defaults when unset."""
        if not self.allowed_hosts_raw:
            return DEFAULT_ALLOWED_HOSTS
        return parse_host_list(self.allowed_hosts_raw)


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    slow_request_ms: int = field(default_factory=lambda: _env_int("SLOW_REQUEST_MS", 800))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class Settings:
    api: ApiConfig = field(default_factory=ApiConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    app: AppConfig = field(default_factory=AppConfig)


def load_settings() -> Settings:
    """Load settings from the environment, reading a local .env first."""
    load_dotenv()
    return Settings()
