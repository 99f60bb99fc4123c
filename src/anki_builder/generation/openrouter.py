"""OpenRouter LLM provider.

OpenRouter exposes many models behind an OpenAI-compatible API, so
requests and responses use the chat completions layout.

Setup:
1. Get API key from https://openrouter.ai/keys
2. Set OPENROUTER_API_KEY environment variable

See: https://openrouter.ai/docs
"""

import logging

from .openai import OpenAIProvider

logger = logging.getLogger(__name__)


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter unified API provider.

    Defaults to free (rate-limited) models; set provider.model and
    provider.fallback_model in the config to use others.
    """

    PRIMARY_MODEL = "meta-llama/llama-3.1-8b-instruct:free"
    FALLBACK_MODEL = "mistralai/mistral-7b-instruct:free"
    API_BASE = "https://openrouter.ai/api/v1"

    def get_name(self) -> str:
        return "openrouter"

    def _headers(self) -> dict:
        headers = super()._headers()
        headers["X-Title"] = "Anki Builder"
        return headers
