"""
LLM Provider factory.
"""

from typing import Optional

from safetalk.llm import LLMProvider


def get_provider(
    provider_name: str = "gemini",
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> Optional[LLMProvider]:
    """Factory — returns the configured LLM provider, or None when disabled."""
    if provider_name in ("", "none"):
        return None
    if provider_name == "gemini":
        from safetalk.llm.gemini import GeminiProvider
        return GeminiProvider(api_key=api_key, model=model)
    raise ValueError(f"Unknown LLM provider: {provider_name}")
