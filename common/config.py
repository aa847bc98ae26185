from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str

    # JSON {name: {good, poor}} merged over the default table
    thresholds_file: Optional[str]

    metrics_retention_ms: float
    cleanup_interval_sec: float  # 0 disables the retention worker

    default_range_ms: float
    max_range_ms: float


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("VITALS_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    return Settings(
        host=os.getenv("VITALS_HOST", "0.0.0.0"),
        port=int(os.getenv("VITALS_PORT", "8002")),
        log_level=os.getenv("VITALS_LOG_LEVEL", "INFO").upper(),
        thresholds_file=os.getenv("VITALS_THRESHOLDS_FILE") or None,
        metrics_retention_ms=float(os.getenv("VITALS_METRICS_RETENTION_MS", str(24 * 60 * 60 * 1000))),
        cleanup_interval_sec=float(os.getenv("VITALS_CLEANUP_INTERVAL_SEC", "300")),
        default_range_ms=float(os.getenv("VITALS_DEFAULT_RANGE_MS", str(60 * 60 * 1000))),
        max_range_ms=float(os.getenv("VITALS_MAX_RANGE_MS", str(7 * 24 * 60 * 60 * 1000))),
    )
