"""
Infrastructure Gateway - Text Generation Implementation

This module implements the text-generation gateway against a hosted model
exposing ``POST /v1/generate``.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from src.domain.entities.errors import TextGenerationError
from src.domain.gateways.text_generation_gateway import (
    ITextGenerationGateway,
    TextGenerationResult,
)

logger = structlog.get_logger(__name__)

DEFAULT_CONFIDENCE = 0.7
_TEXT_KEYS = ("text", "response", "output")


class TextGenerationGateway(ITextGenerationGateway):
    """Implementation of text-generation gateway using HTTP client."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        model: str = "default",
        timeout: float = 10.0,
    ):
        """
        Initialize text-generation gateway.

        Args:
            base_url: Base URL of the text-generation service
            api_key: Bearer token sent with every request, if set
            model: Model name forwarded in the request body
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def generate(self, prompt: str) -> TextGenerationResult:
        url = f"{self.base_url}/v1/generate"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.debug("text_generation.request", url=url, model=self.model)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    json={"prompt": prompt, "model": self.model},
                    headers=headers,
                )
                response.raise_for_status()
                payload = response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                "text_generation.http_error",
                status_code=e.response.status_code,
                response_text=e.response.text,
                url=url,
            )
            raise TextGenerationError(
                f"Text generation HTTP error {e.response.status_code}",
                details={"status_code": e.response.status_code},
            ) from e

        except httpx.RequestError as e:
            logger.error("text_generation.request_error", error=str(e), url=url)
            raise TextGenerationError(
                f"Text generation request failed: {str(e)}"
            ) from e

        except ValueError as e:
            logger.warning("text_generation.malformed_response", error=str(e))
            return TextGenerationResult(text="", confidence=0.0)

        except Exception as e:
            logger.error("text_generation.unexpected_error", error=str(e), url=url)
            raise TextGenerationError(
                f"Text generation unexpected error: {str(e)}"
            ) from e

        return self._parse_response(payload)

    @staticmethod
    def _parse_response(payload: Any) -> TextGenerationResult:
        """Extract text and confidence, tolerating unexpected shapes."""
        if not isinstance(payload, dict):
            logger.warning(
                "text_generation.malformed_response", type=type(payload).__name__
            )
            return TextGenerationResult(text="", confidence=0.0)

        data: Dict[str, Any] = payload
        text = next(
            (data[key] for key in _TEXT_KEYS if isinstance(data.get(key), str)),
            "",
        )

        confidence = data.get("confidence", DEFAULT_CONFIDENCE)
        try:
            confidence = float(confidence)
        except (TypeError, ValueError):
            confidence = DEFAULT_CONFIDENCE
        confidence = max(0.0, min(1.0, confidence))

        return TextGenerationResult(text=text.strip(), confidence=confidence)
