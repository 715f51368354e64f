"""Local persistence."""

from runforge.storage.highscore import HighScoreStore

__all__ = ["HighScoreStore"]
