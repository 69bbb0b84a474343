"""Runtime settings, read from environment variables with defaults."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from tracker.domain import MONTH, TIME_RANGES

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DEFAULT_DATA_PATH = _PROJECT_ROOT / "data" / "tracker.json"
# sample data a fresh data file starts from; only ever read
DEFAULT_SEED_PATH = _PROJECT_ROOT / "data" / "seed.json"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    data_path: Path = DEFAULT_DATA_PATH
    seed_path: Path = DEFAULT_SEED_PATH
    log_level: str = "INFO"
    default_range: str = MONTH
    default_budget_limit: float = 1000.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        data_path = Path(env.get("TRACKER_DATA_PATH", DEFAULT_DATA_PATH)).expanduser()
        seed_path = Path(env.get("TRACKER_SEED_PATH", DEFAULT_SEED_PATH)).expanduser()
        if data_path.resolve() == seed_path.resolve():
            raise ConfigError("TRACKER_DATA_PATH must not point at the seed file")

        log_level = env.get("TRACKER_LOG_LEVEL", "INFO").upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"TRACKER_LOG_LEVEL: unknown level {log_level!r}")

        default_range = env.get("TRACKER_DEFAULT_RANGE", MONTH).lower()
        if default_range not in TIME_RANGES:
            raise ConfigError(f"TRACKER_DEFAULT_RANGE: expected one of {TIME_RANGES}, got {default_range!r}")

        raw_limit = env.get("TRACKER_DEFAULT_BUDGET_LIMIT", "1000")
        try:
            limit = float(raw_limit)
        except ValueError:
            raise ConfigError(f"TRACKER_DEFAULT_BUDGET_LIMIT: not a number: {raw_limit!r}") from None
        if limit < 0:
            raise ConfigError("TRACKER_DEFAULT_BUDGET_LIMIT must be non-negative")

        return cls(
            data_path=data_path,
            seed_path=seed_path,
            log_level=log_level,
            default_range=default_range,
            default_budget_limit=limit,
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
