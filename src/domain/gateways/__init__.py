"""
Gateways Package - Domain Layer

This package contains interfaces defining gateway contracts
for external service communications. Specific implementations
are provided by the infrastructure layer.
"""

from .text_generation_gateway import ITextGenerationGateway, TextGenerationResult

__all__ = ["ITextGenerationGateway", "TextGenerationResult"]
