"""Generative-text collaborator backed by Google Gemini."""

import asyncio
import logging
import os
from typing import Protocol

import google.generativeai as genai

logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.environ.get("GEMINI_MODEL", "gemini-pro-latest")
_timeout = float(os.environ.get("GEMINI_TIMEOUT", "60"))


class GenerationError(Exception):
    """Raised when the text-generation service produces no usable reply."""

    pass


class TextGenerator(Protocol):
    """Prompt string in, text string out."""

    async def generate(self, prompt: str) -> str:
        ...


class GeminiTextGenerator:
    """Text generator using the google-generativeai SDK."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = _timeout,
        temperature: float = 0.3,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY", "")
        if not self.api_key:
            raise ValueError("Gemini API key required (set GEMINI_API_KEY env var)")

        genai.configure(api_key=self.api_key)
        self.model_name = model
        self.timeout = timeout
        self._model = genai.GenerativeModel(
            model_name=model,
            generation_config={"temperature": temperature},
        )
        logger.info(f"Gemini generator initialized model={model}")

    async def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the reply text.

        The SDK call is blocking, so it runs in a worker thread.

        Raises:
            GenerationError: On timeout, a safety block, or an empty reply
        """
        logger.debug(f"gemini request model={self.model_name} prompt_len={len(prompt)}")
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self._model.generate_content, prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(f"Gemini request timed out after {self.timeout}s") from e

        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked (finish_reason != STOP)
            raise GenerationError(f"Gemini returned no text: {e}") from e

        if not text or not text.strip():
            raise GenerationError("Gemini returned an empty reply")
        return text
