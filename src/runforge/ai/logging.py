"""Archive of theme generator traffic.

Every successful generation and every rejected payload is written as its
own JSON document, grouped by day, so a bad world can be traced back to
the exact prompt and raw response that produced it:

    <log_dir>/2026-01-31/themes/theme_generation_142501_1a2b3c4d.json
    <log_dir>/2026-01-31/failures/theme_failure_142733_5e6f7a8b.json
"""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AILogger:
    """Singleton writer for generator records. Never raises."""

    _instance: Optional["AILogger"] = None
    _initialized: bool = False

    def __new__(cls, log_dir: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: Optional[Path] = None):
        if self._initialized:
            return

        if log_dir is None:
            from runforge.config.settings import StorageSettings
            log_dir = StorageSettings().ai_log_path

        self.log_dir = Path(log_dir)
        self._initialized = True
        logger.info(f"Generator records go to {self.log_dir}")

    def _record(self, subdir: str, prefix: str, fields: Dict[str, Any]) -> str:
        """Write one record and return its id, or "" if writing failed."""
        now = datetime.now()
        entry_id = f"{now:%H%M%S}_{uuid.uuid4().hex[:8]}"
        record = {"id": entry_id, "timestamp": now.isoformat(), **fields}

        try:
            folder = self.log_dir / f"{now:%Y-%m-%d}" / subdir
            folder.mkdir(parents=True, exist_ok=True)
            path = folder / f"{prefix}_{entry_id}.json"
            path.write_text(json.dumps(record, ensure_ascii=False, indent=2), encoding="utf-8")
        except Exception as e:
            logger.error(f"Could not write generator record: {e}")
            return ""

        logger.debug(f"Generator record written: {path}")
        return entry_id

    def log_generation(
        self,
        category: str,
        prompt: str,
        response: str,
        model: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Record a raw generator response."""
        return self._record("themes", category, {
            "category": category,
            "model": model,
            "prompt": prompt,
            "response": response,
            "metadata": metadata or {},
        })

    def log_failure(self, prompt: str, reason: str, response: Optional[str] = None) -> str:
        """Record a request whose response could not become a theme."""
        return self._record("failures", "theme_failure", {
            "prompt": prompt,
            "reason": reason,
            "response": response,
        })


_ai_logger: Optional[AILogger] = None


def get_ai_logger(log_dir: Optional[Path] = None) -> AILogger:
    """Get the shared AILogger."""
    global _ai_logger
    if _ai_logger is None:
        _ai_logger = AILogger(log_dir)
    return _ai_logger
