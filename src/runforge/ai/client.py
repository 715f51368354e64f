"""Gemini API client singleton for RUNFORGE.

Wraps the google-genai SDK for schema-constrained JSON generation. The
SDK call blocks, so each attempt runs in a worker thread under a timeout.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from runforge.ai.logging import get_ai_logger
from runforge.config.settings import AISettings

logger = logging.getLogger(__name__)


class GeminiModel(Enum):
    """Models known to honour a response schema."""

    FLASH_3 = "gemini-3-flash-preview"
    FLASH = "gemini-2.5-flash"


@dataclass
class GeminiConfig:
    """Connection and sampling parameters for theme requests."""

    api_key: str
    model: str = GeminiModel.FLASH_3.value
    timeout: float = 60.0
    max_retries: int = 3
    retry_delay: float = 1.0
    temperature: float = 0.9
    max_output_tokens: int = 2048

    @classmethod
    def from_settings(cls, settings: AISettings) -> "GeminiConfig":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.theme_model,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
        )


def _is_overloaded(error: Exception) -> bool:
    """Transient capacity errors are worth another attempt."""
    text = str(error).lower()
    return "503" in text or "overloaded" in text or "unavailable" in text


class GeminiClient:
    """Singleton Gemini API client.

    The SDK client is created lazily on the first request so that the
    game starts without network access or credentials.
    """

    _instance: Optional["GeminiClient"] = None
    _initialized: bool = False

    def __new__(cls, config: Optional[GeminiConfig] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config: Optional[GeminiConfig] = None):
        if self._initialized:
            return

        self.config = config or GeminiConfig.from_settings(AISettings())
        self._client = None
        self._initialized = True

        if not self.config.api_key:
            logger.warning("GEMINI_API_KEY not set, theme generation will fail")
        logger.info(f"GeminiClient ready (model {self.config.model})")

    @property
    def is_available(self) -> bool:
        """True when an API key is configured."""
        return bool(self.config.api_key)

    async def _ensure_client(self) -> bool:
        if self._client is not None:
            return True

        if not self.config.api_key:
            logger.error("Cannot reach the generator: no API key")
            return False

        try:
            from google import genai

            self._client = genai.Client(api_key=self.config.api_key)
            logger.info("Gemini API client connected")
            return True
        except Exception as e:
            logger.error(f"Failed to create Gemini client: {e}")
            return False

    def _request_config(
        self,
        response_schema: Dict[str, Any],
        system_instruction: Optional[str],
        temperature: Optional[float],
    ):
        from google.genai import types

        return types.GenerateContentConfig(
            temperature=self.config.temperature if temperature is None else temperature,
            max_output_tokens=self.config.max_output_tokens,
            system_instruction=system_instruction,
            response_mime_type="application/json",
            response_schema=response_schema,
        )

    async def generate_json(
        self,
        prompt: str,
        response_schema: Dict[str, Any],
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        category: str = "json_generation",
    ) -> Optional[str]:
        """Generate a JSON document constrained by a response schema.

        Timeouts, empty responses and overload errors are retried with a
        linearly growing delay; anything else fails immediately.

        Args:
            prompt: The user prompt
            response_schema: OpenAPI-style schema the response must follow
            model: Override the configured model name
            system_instruction: Optional system prompt
            temperature: Override the configured temperature
            category: Label used when logging the generation

        Returns:
            Raw JSON text, or None once retries are exhausted or on error
        """
        if not await self._ensure_client():
            return None

        model_name = model or self.config.model

        try:
            request_config = self._request_config(response_schema, system_instruction, temperature)

            for attempt in range(1, self.config.max_retries + 1):
                try:
                    response = await asyncio.wait_for(
                        asyncio.to_thread(
                            self._client.models.generate_content,
                            model=model_name,
                            contents=prompt,
                            config=request_config,
                        ),
                        timeout=self.config.timeout,
                    )
                except asyncio.TimeoutError:
                    logger.warning(f"Generator timed out (attempt {attempt}/{self.config.max_retries})")
                    continue
                except Exception as e:
                    if not _is_overloaded(e):
                        raise
                    logger.warning(f"Generator overloaded (attempt {attempt}/{self.config.max_retries})")
                    await asyncio.sleep(self.config.retry_delay * attempt)
                    continue

                text = getattr(response, "text", None)
                if text:
                    self._log(category, prompt, text, model_name)
                    return text
                logger.warning(f"Empty generator response (attempt {attempt}/{self.config.max_retries})")

            logger.error("Generator retries exhausted")
            return None

        except Exception as e:
            logger.error(f"JSON generation failed: {e}")
            return None

    def _log(self, category: str, prompt: str, text: str, model_name: str) -> None:
        try:
            get_ai_logger().log_generation(
                category=category,
                prompt=prompt,
                response=text,
                model=model_name,
            )
        except Exception as e:
            logger.debug(f"Failed to record generation: {e}")


_client: Optional[GeminiClient] = None


def get_gemini_client(config: Optional[GeminiConfig] = None) -> GeminiClient:
    """Get the shared client. `config` only applies on the first call."""
    global _client
    if _client is None:
        _client = GeminiClient(config)
    return _client
