"""Centralized configuration loading.

Loads environment variables once and provides a typed Settings object
for the rest of the codebase. Values are read when a Settings instance is
created, so tests can tweak the environment before calling get_settings().
"""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv


# Load .env once at import time
load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


@dataclass
class Settings:
    # Backend API (versioned root)
    api_base_url: str = field(
        default_factory=lambda: _env("JOBIFY_API_URL", "http://localhost:5000/api/v1")
    )
    request_timeout: float = field(
        default_factory=lambda: float(_env("JOBIFY_REQUEST_TIMEOUT", "10.0"))
    )

    # Session storage (root-level data directory by default)
    storage_url: str = field(
        default_factory=lambda: _env(
            "JOBIFY_STORAGE_URL",
            "sqlite:///" + os.path.join(PROJECT_ROOT, "data", "session.db"),
        )
    )

    # UI behaviour
    alert_delay_ms: int = field(
        default_factory=lambda: int(_env("JOBIFY_ALERT_DELAY_MS", "3000"))
    )
    jobs_page_limit: int = field(
        default_factory=lambda: int(_env("JOBIFY_JOBS_LIMIT", "10"))
    )

    # Logging
    log_level: str = field(default_factory=lambda: _env("JOBIFY_LOG_LEVEL", "INFO"))

    @property
    def alert_delay_seconds(self) -> float:
        return self.alert_delay_ms / 1000.0


def get_settings() -> Settings:
    """Return a new Settings instance (cheap dataclass construction)."""
    return Settings()
