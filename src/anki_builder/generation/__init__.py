"""LLM providers for card generation."""

import requests

from .base import LLMProvider, LLMResponse, ResponseShape
from .openai import OpenAIProvider
from .gemini import GeminiProvider
from .openrouter import OpenRouterProvider
from .card_generator import CardGenerator, GenerationResult

from ..core.config import ProviderConfig, API_KEY_ENV_VARS

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ResponseShape",
    "OpenAIProvider",
    "GeminiProvider",
    "OpenRouterProvider",
    "CardGenerator",
    "GenerationResult",
    "get_provider",
    "list_providers",
]


# Provider registry with info
PROVIDERS = {
    "gemini": {
        "class": GeminiProvider,
        "free": True,  # Free tier available
        "env_vars": API_KEY_ENV_VARS["gemini"],
    },
    "openai": {
        "class": OpenAIProvider,
        "free": False,
        "env_vars": API_KEY_ENV_VARS["openai"],
    },
    "openrouter": {
        "class": OpenRouterProvider,
        "free": True,  # Free models available
        "env_vars": API_KEY_ENV_VARS["openrouter"],
    },
}


def get_provider(config: ProviderConfig, session: requests.Session = None) -> LLMProvider:
    """Get appropriate LLM provider based on configuration.

    Args:
        config: Provider configuration
        session: Optional HTTP session shared across requests

    Returns:
        LLMProvider instance
    """
    provider_info = PROVIDERS.get(config.name.lower())
    if not provider_info:
        available = ", ".join(PROVIDERS.keys())
        raise ValueError(
            f"Unknown provider: {config.name}. Available: {available}"
        )

    return provider_info["class"](config, session=session)


def list_providers() -> dict:
    """List available providers with their info."""
    return {
        name: {
            "free": info["free"],
            "env_vars": info["env_vars"],
            "default_model": info["class"].PRIMARY_MODEL,
            "fallback_model": info["class"].FALLBACK_MODEL,
        }
        for name, info in PROVIDERS.items()
    }
