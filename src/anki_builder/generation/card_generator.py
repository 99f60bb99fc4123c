"""Card generation pipeline.

One phrase in, one display card out:

    prompt template -> LLM provider (primary, then fallback model)
                    -> tolerant JSON extraction -> display card

Nothing is cached or batched; each call is one independent request.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.assembly import assemble_card
from ..core.cancellation import CancellationToken
from ..core.exceptions import ParseError
from ..core.models import DisplayCard, GeneratedCard, GenerationRequest
from ..core.parsing import parse_card_response
from .base import LLMProvider, LLMResponse
from .prompts import PromptTemplate

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Result from card generation."""
    request: GenerationRequest
    card: GeneratedCard
    display: DisplayCard
    response: LLMResponse


class CardGenerator:
    """Generates a vocabulary card for a single phrase."""

    def __init__(self, provider: LLMProvider, prompt: PromptTemplate, language: str):
        self.provider = provider
        self.prompt = prompt
        self.language = language

    def build_prompt(self, request: GenerationRequest) -> str:
        return self.prompt.render(request.phrase, language=self.language)

    def generate(
        self,
        phrase: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate and parse a card for `phrase`.

        Raises:
            GenerationError: If both models failed
            ParseError: If the model output held no usable JSON
            CancelledError: If shutdown was requested
        """
        request = GenerationRequest(phrase=phrase)
        response = self.provider.generate(self.build_prompt(request), cancel_token)

        if response.fallback_used:
            logger.info(f"Card for '{phrase}' generated by fallback model {response.model}")

        try:
            card = parse_card_response(response.content)
        except ParseError:
            logger.debug(f"Unparseable response from {response.model}: {response.content[:500]}")
            raise

        if not card.headword:
            logger.warning(f"Model returned no headword for '{phrase}'")

        return GenerationResult(
            request=request,
            card=card,
            display=assemble_card(card),
            response=response,
        )
