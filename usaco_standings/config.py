from dataclasses import dataclass, fields, replace
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from usaco_standings.exceptions import ConfigurationError, ValidationError
from usaco_standings.models import Season
from usaco_standings.sources.usaco_source import DEFAULT_BASE_URL


def default_max_season(now: datetime | None = None) -> Season:
    """The season currently running, or about to start.

    A new season's contests begin in the winter, so from October on the
    upcoming season is included.
    """
    now = now or datetime.now()
    return Season(now.year + (1 if now.month >= 10 else 0))


@dataclass(frozen=True)
class ScrapeConfig:
    base_url: str = DEFAULT_BASE_URL
    min_delay: float = 1.0
    max_delay: float = 3.0
    retries: int = 3
    cache_dir: str | None = None
    max_season: Season | None = None

    @property
    def delay_range(self) -> tuple[float, float]:
        return (self.min_delay, self.max_delay)

    def resolved_max_season(self) -> Season:
        return self.max_season or default_max_season()

    def with_overrides(self, **overrides: Any) -> "ScrapeConfig":
        """Returns a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "max_season" in values and not isinstance(values["max_season"], Season):
            values["max_season"] = _parse_season(values["max_season"])
        return replace(self, **values)


def _parse_season(value: Any) -> Season:
    try:
        return Season.parse(str(value))
    except ValidationError as e:
        raise ConfigurationError(
            e.message,
            parameter="max_season",
            expected_format="YYYY-YY",
            example="2024-25",
        ) from e


def load_config(path: str | None) -> ScrapeConfig:
    """Loads a YAML configuration file.

    Args:
        path: Path to the file, or None for the defaults.

    Raises:
        ConfigurationError: If the file is unreadable or holds invalid values.
    """
    if path is None:
        return ScrapeConfig()

    config_path = Path(path)
    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Could not read configuration file {config_path}: {e}",
            parameter="config",
        ) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Configuration file {config_path} must contain a mapping",
            parameter="config",
        )

    known = {f.name for f in fields(ScrapeConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            parameter=unknown[0],
            suggestion=f"Valid keys are: {', '.join(sorted(known))}",
        )

    values = dict(raw)
    if values.get("max_season") is not None:
        values["max_season"] = _parse_season(values["max_season"])

    for key in ("min_delay", "max_delay"):
        if key in values and not isinstance(values[key], (int, float)):
            raise ConfigurationError(
                f"'{key}' must be a number of seconds",
                parameter=key,
                expected_format="number",
                example="1.5",
            )
    if "retries" in values and (not isinstance(values["retries"], int) or values["retries"] < 1):
        raise ConfigurationError(
            "'retries' must be a positive integer",
            parameter="retries",
            expected_format="integer >= 1",
            example="3",
        )

    config = ScrapeConfig(**values)
    if config.min_delay > config.max_delay:
        raise ConfigurationError(
            "'min_delay' must not exceed 'max_delay'",
            parameter="min_delay",
        )
    return config
