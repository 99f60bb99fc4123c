"""OpenAI LLM provider implementation."""

import logging

from .base import LLMProvider, ProviderRequest, ResponseShape

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider (gpt-4o, falling back to gpt-4o-mini)."""

    PRIMARY_MODEL = "gpt-4o"
    FALLBACK_MODEL = "gpt-4o-mini"
    API_BASE = "https://api.openai.com/v1"
    RESPONSE_SHAPE = ResponseShape.CHOICES

    def get_name(self) -> str:
        return "openai"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key()}",
            "Content-Type": "application/json",
        }

    def build_request(self, model: str, prompt: str) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.api_base}/chat/completions",
            payload={
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self.config.max_tokens,
            },
            headers=self._headers(),
        )
