"""AI module for RUNFORGE - Gemini integration for theme generation."""

from runforge.ai.client import GeminiClient, GeminiConfig, get_gemini_client
from runforge.ai.theme_provider import ThemeGenerationError, ThemeProvider

__all__ = [
    # Client
    "GeminiClient",
    "GeminiConfig",
    "get_gemini_client",
    # Themes
    "ThemeProvider",
    "ThemeGenerationError",
]
