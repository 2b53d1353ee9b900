from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .fill.visibility import VisibilityThresholds

load_dotenv()


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_hosts(raw: str) -> tuple[str, ...]:
    return tuple(sorted({entry.strip() for entry in raw.split(",") if entry.strip()}))


@dataclass(slots=True)
class Settings:
    """Application configuration loaded from environment variables."""

    headless_default: bool = True
    step_timeout_s: int = 30
    allowlist_hosts: tuple[str, ...] = field(default_factory=tuple)
    min_field_width: float = 30
    min_field_height: float = 10
    opacity_limit: float = 0.1
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            headless_default=_bool_env("HEADLESS_DEFAULT", True),
            step_timeout_s=int(os.getenv("STEP_TIMEOUT_S", "30")),
            allowlist_hosts=_parse_hosts(os.getenv("ALLOWLIST_HOSTS", "")),
            min_field_width=float(os.getenv("MIN_FIELD_WIDTH", "30")),
            min_field_height=float(os.getenv("MIN_FIELD_HEIGHT", "10")),
            opacity_limit=float(os.getenv("OPACITY_LIMIT", "0.1")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=Path(os.getenv("LOG_DIR", "logs")),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "8000")),
        )
        return settings

    def ensure_directories(self) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def update_allowlist(self, hosts: Sequence[str]) -> None:
        cleaned = tuple(sorted({host.strip() for host in hosts if host.strip()}))
        if cleaned:
            self.allowlist_hosts = cleaned

    def thresholds(self) -> VisibilityThresholds:
        return VisibilityThresholds(
            min_width=self.min_field_width,
            min_height=self.min_field_height,
            opacity_limit=self.opacity_limit,
        )
