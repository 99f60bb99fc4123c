"""Abstract base class for LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import json
import logging
import time

import requests

from ..core.cancellation import CancellationToken
from ..core.config import ProviderConfig
from ..core.exceptions import (
    ConfigError,
    EmptyResponseError,
    GenerationError,
    TransportError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

# Errors that make an attempt count as failed and trigger the fallback
ATTEMPT_ERRORS = (TransportError, UpstreamError, EmptyResponseError)


class ResponseShape(Enum):
    """Envelope layouts returned by the supported APIs."""
    CANDIDATES = "candidates"   # candidates[0].content.parts[0].text
    CHOICES = "choices"         # choices[0].message.content


@dataclass
class ProviderRequest:
    """One HTTP request to a provider endpoint."""
    url: str
    payload: dict
    headers: dict = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str
    model: str
    provider: str

    # Timing
    latency_ms: float = 0.0

    # True when the primary model failed and the fallback answered
    fallback_used: bool = False

    raw_response: Optional[dict] = None


def extract_text(shape: ResponseShape, data, provider: str = None) -> str:
    """Pull the generated text out of a decoded response envelope.

    Raises:
        EmptyResponseError: If the envelope lacks the expected content
    """
    try:
        if shape is ResponseShape.CANDIDATES:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        else:
            text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise EmptyResponseError(f"No content in response ({shape.value} missing)", provider=provider)

    if not isinstance(text, str) or not text.strip():
        raise EmptyResponseError("Response content is empty", provider=provider)

    return text


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Each request goes to the primary model first. On any failure it is
    retried exactly once against the fallback model; when that fails too
    a GenerationError carrying both causes is raised.

    Subclasses set PRIMARY_MODEL, FALLBACK_MODEL, API_BASE and
    RESPONSE_SHAPE, and implement:
    - build_request(model, prompt) -> ProviderRequest
    - get_name() -> str
    """

    PRIMARY_MODEL: str = ""
    FALLBACK_MODEL: str = ""
    API_BASE: str = ""
    RESPONSE_SHAPE: ResponseShape = ResponseShape.CHOICES

    def __init__(self, config: ProviderConfig, session: requests.Session = None):
        self.config = config
        self.session = session or requests.Session()
        self.primary_model = config.model or self.PRIMARY_MODEL
        self.fallback_model = config.fallback_model or self.FALLBACK_MODEL
        self.api_base = (config.api_base or self.API_BASE).rstrip("/")

        if self.primary_model == self.fallback_model:
            raise ConfigError(
                f"Fallback model must differ from primary model ({self.primary_model})",
                config_key="provider.fallback_model",
            )

        self._request_count = 0
        self._fallback_count = 0

    @abstractmethod
    def build_request(self, model: str, prompt: str) -> ProviderRequest:
        """Build the HTTP request for one attempt against `model`."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return provider name."""
        pass

    def _api_key(self) -> str:
        api_key = self.config.resolve_api_key()
        if not api_key:
            raise ConfigError(
                f"{self.get_name()} API key not found in config or environment",
                config_key="provider.api_key",
            )
        return api_key

    def generate(
        self,
        prompt: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> LLMResponse:
        """Generate a response, falling back to the second model once.

        Args:
            prompt: Fully rendered prompt
            cancel_token: Checked before each attempt

        Returns:
            LLMResponse with generated content

        Raises:
            GenerationError: If both models fail
            CancelledError: If shutdown was requested before an attempt
        """
        if cancel_token:
            cancel_token.raise_if_cancelled()

        try:
            response = self._attempt(self.primary_model, prompt)
        except ATTEMPT_ERRORS as primary_error:
            logger.warning(
                f"Request with model '{self.primary_model}' failed: {primary_error}. "
                f"Retrying with fallback model '{self.fallback_model}'"
            )
            if cancel_token:
                cancel_token.raise_if_cancelled()

            try:
                response = self._attempt(self.fallback_model, prompt)
            except ATTEMPT_ERRORS as fallback_error:
                raise GenerationError(
                    f"Both {self.get_name()} model requests failed; "
                    f"initial error ({self.primary_model}): {primary_error}; "
                    f"fallback error ({self.fallback_model}): {fallback_error}",
                    primary_error=primary_error,
                    fallback_error=fallback_error,
                )
            response.fallback_used = True
            self._fallback_count += 1

        self._request_count += 1
        return response

    def _attempt(self, model: str, prompt: str) -> LLMResponse:
        """Send one request to `model`.

        The configured timeout bounds the whole attempt, body included:
        requests' own timeout only covers the connect and each socket read.
        """
        request = self.build_request(model, prompt)
        name = self.get_name()

        start_time = time.time()
        deadline = time.monotonic() + self.config.timeout

        try:
            response = self.session.post(
                request.url,
                json=request.payload,
                headers=request.headers,
                timeout=self.config.timeout,
                stream=True,
            )
            text = self._read_body(response, model, deadline)
        except requests.exceptions.Timeout:
            raise TransportError(
                f"{name} request to '{model}' timed out after {self.config.timeout:.0f}s",
                provider=name,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to make request to '{model}': {e}", provider=name)

        if response.status_code != 200:
            raise UpstreamError(
                f"API request failed with status {response.status_code} and body {text}",
                status_code=response.status_code,
                body=text,
                provider=name,
            )

        try:
            data = json.loads(text)
        except ValueError as e:
            raise UpstreamError(
                f"Failed to decode response {text[:200]}: {e}",
                status_code=response.status_code,
                body=text,
                provider=name,
            )

        content = extract_text(self.RESPONSE_SHAPE, data, provider=name)
        latency_ms = (time.time() - start_time) * 1000

        logger.debug(f"{name}/{model} answered in {latency_ms:.0f}ms")

        return LLMResponse(
            content=content.strip(),
            model=model,
            provider=name,
            latency_ms=latency_ms,
            raw_response=data if isinstance(data, dict) else None,
        )

    def _read_body(self, response, model: str, deadline: float) -> str:
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=8192):
                if time.monotonic() > deadline:
                    raise TransportError(
                        f"{self.get_name()} request to '{model}' timed out after "
                        f"{self.config.timeout:.0f}s while reading the response",
                        provider=self.get_name(),
                    )
                chunks.append(chunk)
        finally:
            response.close()
        return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")

    def get_stats(self) -> dict:
        """Get provider usage statistics."""
        return {
            "provider": self.get_name(),
            "model": self.primary_model,
            "fallback_model": self.fallback_model,
            "requests": self._request_count,
            "fallbacks": self._fallback_count,
        }
