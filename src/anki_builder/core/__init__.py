"""Core models, configuration, and exceptions."""

from .models import (
    GenerationRequest,
    GeneratedCard,
    DisplayCard,
    NoteSchema,
    AnkiNote,
    FieldMapping,
)
from .config import Config, ProviderConfig, AnkiConfig, load_config
from .exceptions import (
    AnkiBuilderError,
    ConfigError,
    TransportError,
    NetworkError,
    UpstreamError,
    EmptyResponseError,
    GenerationError,
    ParseError,
    NoStructuredPayloadError,
    PayloadDecodeError,
    SubmissionError,
    StoreUnavailableError,
    CancelledError,
    SchemaDegradedWarning,
)
from .parsing import parse_card_response, card_from_dict, extract_payload
from .assembly import assemble_card

__all__ = [
    "GenerationRequest",
    "GeneratedCard",
    "DisplayCard",
    "NoteSchema",
    "AnkiNote",
    "FieldMapping",
    "Config",
    "ProviderConfig",
    "AnkiConfig",
    "load_config",
    "AnkiBuilderError",
    "ConfigError",
    "TransportError",
    "NetworkError",
    "UpstreamError",
    "EmptyResponseError",
    "GenerationError",
    "ParseError",
    "NoStructuredPayloadError",
    "PayloadDecodeError",
    "SubmissionError",
    "StoreUnavailableError",
    "CancelledError",
    "SchemaDegradedWarning",
    "parse_card_response",
    "card_from_dict",
    "extract_payload",
    "assemble_card",
]
