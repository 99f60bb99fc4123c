"""Shared parsing utilities for LLM responses."""

import json
import logging

from .models import GeneratedCard
from .exceptions import NoStructuredPayloadError, PayloadDecodeError

logger = logging.getLogger(__name__)


def extract_payload(content: str) -> str:
    """Return the text between the first '{' and the last '}'.

    Args:
        content: Raw model output, possibly with commentary around the JSON

    Returns:
        The candidate JSON object text

    Raises:
        NoStructuredPayloadError: If no '{' ... '}' pair is present
    """
    content = content.strip()
    start = content.find("{")
    end = content.rfind("}")

    if start == -1 or end == -1 or end < start:
        logger.debug(f"Content preview: {content[:200]}...")
        raise NoStructuredPayloadError(
            f"No JSON object found in response (length={len(content)})"
        )

    return content[start:end + 1]


def _text_value(value) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _text_list(value) -> list[str]:
    """Coerce a decoded JSON value into a list of strings.

    A bare string becomes a one-item list; numbers are stringified;
    anything else is dropped.
    """
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, list):
        return []

    items = []
    for item in value:
        text = _text_value(item)
        if text:
            items.append(text)
    return items


def card_from_dict(data: dict) -> GeneratedCard:
    """Build a GeneratedCard from a decoded payload.

    Unknown keys are ignored and missing or mistyped keys fall back to
    empty values, so partial model output still yields a card.
    """
    return GeneratedCard(
        headword=_text_value(data.get("phrase", "")).strip(),
        translations=_text_list(data.get("translations")),
        examples=_text_list(data.get("examples")),
        notes=_text_list(data.get("notes")),
    )


def parse_card_response(content: str) -> GeneratedCard:
    """Parse a vocabulary card from a model response.

    Args:
        content: Raw model output

    Returns:
        GeneratedCard with whatever fields could be decoded

    Raises:
        NoStructuredPayloadError: If the output holds no JSON object
        PayloadDecodeError: If the JSON object is malformed
    """
    payload = extract_payload(content)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise PayloadDecodeError(
            f"Failed to parse JSON response: {e}", payload=payload
        ) from e

    if not isinstance(data, dict):
        raise PayloadDecodeError(
            f"Expected JSON object, got {type(data).__name__}", payload=payload
        )

    card = card_from_dict(data)
    if card.is_empty:
        logger.warning("Response decoded but no card fields were present")

    return card
