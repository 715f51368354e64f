"""Persistent best score, stored as a small JSON file."""

import json
import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class HighScoreStore:
    """Holds a single best score across sessions.

    Read failures count as a best of 0 and write failures keep the value
    in memory only; neither is fatal.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._best = 0
        self._load()

    @property
    def best(self) -> int:
        return self._best

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            self._best = max(0, int(data.get("high_score", 0)))
            logger.info(f"Loaded high score {self._best}")
        except Exception as e:
            logger.error(f"Failed to load high score from {self.path}: {e}")
            self._best = 0

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(
                    {"high_score": self._best, "updated_at": datetime.now().isoformat()},
                    f,
                    indent=2,
                )
        except Exception as e:
            logger.error(f"Failed to save high score to {self.path}: {e}")

    def record(self, score: int) -> int:
        """Fold a finished run into the best score and return the new best."""
        if score > self._best:
            logger.info(f"New high score: {score} (was {self._best})")
            self._best = score
            self._save()
        return self._best
