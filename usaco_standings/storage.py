import json
from datetime import UTC, datetime
from pathlib import Path

import structlog

from usaco_standings.models import UsacoData

logger = structlog.get_logger(__name__)


class Storage:
    """Loads and saves the scraped dataset as a single JSON file."""

    def __init__(self, path: str):
        """Initializes the Storage instance.

        Args:
            path: Path to the dataset file (e.g. 'data/usaco.json').
        """
        self.path = Path(path)
        self.schema_version = "1.0"

    def load(self) -> UsacoData | None:
        """Loads the dataset.

        Returns:
            The dataset, or None if the file does not exist or is unreadable.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("dataset_load_failed", error=str(e), path=str(self.path))
            return None

        return UsacoData.from_dict(raw.get("data", {}))

    def save(self, data: UsacoData) -> None:
        """Writes the dataset, replacing any previous file."""
        payload = {
            "schema_version": self.schema_version,
            "last_scraped_at": datetime.now(UTC).isoformat(),
            "data": data.to_dict(),
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        logger.info(
            "dataset_saved",
            path=str(self.path),
            contests=len(data.contests),
            camps=len(data.camps),
        )
