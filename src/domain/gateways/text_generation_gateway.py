"""
Domain Gateway - Text Generation

This module defines the gateway interface for the hosted text model used to
produce narrative forecast insights.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TextGenerationResult:
    """Free-form text plus the collaborator's confidence scalar."""

    text: str
    confidence: float = 0.7


class ITextGenerationGateway(ABC):
    """Interface for text-generation gateway."""

    @abstractmethod
    async def generate(self, prompt: str) -> TextGenerationResult:
        """
        Generate text for a structured prompt.

        Args:
            prompt: Prompt summarizing target metric, trend, seasonality and
                volatility

        Returns:
            Generated text; empty when the response could not be parsed

        Raises:
            TextGenerationError: When the collaborator cannot be reached or
                answers with an error status
        """
        pass
