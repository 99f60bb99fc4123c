"""Google Gemini LLM provider.

Talks to the generateContent REST endpoint directly. Requests use the
parts-based conversational layout and responses come back as a
candidates array.

Setup:
1. Get API key from https://aistudio.google.com/app/apikey
2. Set GEMINI_API_KEY (or GOOGLE_API_KEY), or put it in the config file
"""

import logging

from .base import LLMProvider, ProviderRequest, ResponseShape

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Google Gemini API provider.

    gemini-2.5-flash is tried first; gemini-2.0-flash is the fallback
    when the newer model is overloaded or erroring.
    """

    PRIMARY_MODEL = "gemini-2.5-flash"
    FALLBACK_MODEL = "gemini-2.0-flash"
    API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
    RESPONSE_SHAPE = ResponseShape.CANDIDATES

    def get_name(self) -> str:
        return "gemini"

    def build_request(self, model: str, prompt: str) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.api_base}/{model}:generateContent",
            payload={
                "contents": [
                    {"parts": [{"text": prompt}]},
                ],
            },
            headers={
                "X-Goog-Api-Key": self._api_key(),
                "Content-Type": "application/json",
            },
        )
