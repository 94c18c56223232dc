"""Gemini Client - HTTP access to the generative language API.

Sends prompts (text and inline images) to `generateContent` and returns
the first candidate's text, parsed as JSON when a response schema is given.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-preview-05-20"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class AIServiceError(Exception):
    """The AI service failed or answered with something unusable.

    Always transient from the caller's point of view: retrying the action
    is the recovery.
    """


@dataclass
class GeminiConfig:
    """Configuration for the Gemini client.

    Attributes:
        api_key: Generative language API key
        model: Model name used in the request path
        base_url: API root, without trailing slash
        timeout: Request timeout in seconds
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 60.0


class GeminiClient:
    """Async client for Gemini `generateContent` calls."""

    def __init__(self, config: GeminiConfig, http_client: httpx.AsyncClient | None = None) -> None:
        if not config.api_key:
            raise AIServiceError("Gemini API key is not configured.")
        self.config = config
        self._http = http_client or httpx.AsyncClient()

    async def generate_text(
        self,
        system_prompt: str,
        parts: list[dict],
        schema: dict | None = None,
    ) -> str:
        """Run one generation and return the first candidate's text.

        Args:
            system_prompt: System instruction text
            parts: User content parts (text or inline image)
            schema: Optional response schema; forces a JSON response

        Returns:
            The candidate text

        Raises:
            AIServiceError: On transport errors, non-2xx responses or an
                empty candidate
        """
        body: dict[str, Any] = {
            "contents": [{"parts": parts}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
        }
        if schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            }

        url = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        try:
            response = await self._http.post(
                url,
                params={"key": self.config.api_key},
                json=body,
                timeout=self.config.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Gemini returned %d", e.response.status_code)
            raise AIServiceError(f"API error: {e.response.reason_phrase}") from e
        except httpx.HTTPError as e:
            logger.error("Gemini request failed: %s", str(e))
            raise AIServiceError("Could not reach the AI service.") from e

        try:
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIServiceError("Invalid response structure from API.") from e
        if not text:
            raise AIServiceError("Invalid response from AI.")
        return text

    async def generate_json(self, system_prompt: str, parts: list[dict], schema: dict) -> Any:
        """Run a schema-constrained generation and parse the JSON answer."""
        text = await self.generate_text(system_prompt, parts, schema=schema)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Gemini returned non-JSON output")
            raise AIServiceError("Invalid response from AI.") from e

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self._http.aclose()
