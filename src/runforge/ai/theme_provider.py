"""Theme generation service.

Turns a free-text world prompt into a validated Theme using Gemini with a
JSON response schema. Any transport, parse or schema problem is a failure;
there is no partial-theme recovery.
"""

import logging
from typing import Optional, Protocol

from runforge.ai.client import get_gemini_client
from runforge.ai.logging import get_ai_logger
from runforge.theme import THEME_RESPONSE_SCHEMA, Theme, ThemeError, parse_theme

logger = logging.getLogger(__name__)


GENERIC_FAILURE_MESSAGE = "Game generation failed. Please try a different prompt."

THEME_PROMPT_TEMPLATE = """Create a comprehensive Subway Surfers style game configuration based on this theme: "{prompt}".
The configuration must include a consistent color palette, a character emoji, and three types of obstacles:
1. 'jump': A low barrier the player can leap over.
2. 'slide': A high obstacle (like a bar or tunnel) the player must slide under.
3. 'dodge': A tall wall or block that cannot be jumped or slid under.
Be creative! If the prompt is 'Pizza Shop', obstacles could be spilled sauce, hanging pans, and pizza ovens."""


class ThemeGenerationError(Exception):
    """Raised when the generator cannot produce a usable theme."""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE, reason: str = ""):
        super().__init__(message)
        self.reason = reason


class JsonGenerator(Protocol):
    """Anything that can produce schema-constrained JSON text."""

    async def generate_json(
        self,
        prompt: str,
        response_schema: dict,
        category: str = ...,
    ) -> Optional[str]:
        ...


class ThemeProvider:
    """Service for generating AI-powered themes."""

    def __init__(self, client: Optional[JsonGenerator] = None, log_failures: bool = True):
        self._client = client if client is not None else get_gemini_client()
        self._log_failures = log_failures

    def build_prompt(self, prompt: str) -> str:
        """Build the generator prompt for a world description."""
        return THEME_PROMPT_TEMPLATE.format(prompt=prompt.strip())

    async def generate_theme(self, prompt: str) -> Theme:
        """Generate a theme for a world description.

        Args:
            prompt: Free-text world description

        Returns:
            Validated Theme

        Raises:
            ThemeGenerationError: On empty prompt, transport failure,
                unparsable payload or schema violation
        """
        if not prompt or not prompt.strip():
            raise ThemeGenerationError(reason="empty prompt")

        logger.info(f"Generating theme for prompt: {prompt.strip()[:60]}")

        try:
            response = await self._client.generate_json(
                prompt=self.build_prompt(prompt),
                response_schema=THEME_RESPONSE_SCHEMA,
                category="theme_generation",
            )
        except Exception as e:
            logger.error(f"Theme request failed: {e}")
            self._record_failure(prompt, f"transport: {e}")
            raise ThemeGenerationError(reason=str(e)) from e

        if not response:
            logger.error("Theme generator returned no response")
            self._record_failure(prompt, "empty response")
            raise ThemeGenerationError(reason="empty response")

        try:
            theme = parse_theme(response)
        except ThemeError as e:
            logger.error(f"Failed to parse generator response: {e}")
            self._record_failure(prompt, str(e), response)
            raise ThemeGenerationError(reason=str(e)) from e
        except Exception as e:
            logger.error(f"Unexpected error parsing generator response: {e}")
            self._record_failure(prompt, f"parse: {e}", response)
            raise ThemeGenerationError(reason=str(e)) from e

        logger.info(
            f"Theme ready: '{theme.world_name}' with {len(theme.obstacles)} obstacles, "
            f"{len(theme.collectibles)} collectibles"
        )
        return theme

    def _record_failure(self, prompt: str, reason: str, response: Optional[str] = None) -> None:
        if not self._log_failures:
            return
        get_ai_logger().log_failure(prompt=prompt, reason=reason, response=response)
