"""
LLM Provider — Abstract Interface

The remote capability boundary: one operation, generate(prompt) -> text.
Swap providers by changing SAFETALK_LLM_PROVIDER in env.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class CircuitOpenError(Exception):
    """Raised when a provider's circuit breaker is open."""


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    @property
    def available(self) -> bool:
        """Whether the provider is configured (credential present) and usable."""
        return True

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Generate a free-form text response from the LLM."""
        ...
