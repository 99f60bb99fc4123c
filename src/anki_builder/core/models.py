"""Core data models for vocabulary cards and note schemas."""

from dataclasses import dataclass, field
from typing import Optional

from .exceptions import SchemaDegradedWarning

# Fields of AnkiConnect's built-in "Basic" note type
DEFAULT_NOTE_TYPE = "Basic"
DEFAULT_FIELDS = ("Front", "Back")

# Field name -> field text, built and consumed within one submission
FieldMapping = dict[str, str]


@dataclass(frozen=True)
class GenerationRequest:
    """A single phrase typed by the user."""
    phrase: str


@dataclass
class GeneratedCard:
    """Structured card data decoded from model output.

    Every field tolerates being empty: the provider does not guarantee
    any of them.
    """
    headword: str = ""
    translations: list[str] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.headword or self.translations or self.examples or self.notes)


@dataclass(frozen=True)
class DisplayCard:
    """Presentation-ready card text, one block per note field."""
    primary_text: str
    translation_block: str
    example_block: str
    notes_block: str


@dataclass
class NoteSchema:
    """Note type and its fields as currently exposed by the note store."""
    note_type: str
    field_names: tuple[str, ...]
    warning: Optional[SchemaDegradedWarning] = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None

    def has_fields(self, names) -> bool:
        """Check whether every name in `names` is a field of this schema."""
        return set(names).issubset(self.field_names)

    @classmethod
    def fallback(cls, note_type: str, warning: SchemaDegradedWarning = None) -> "NoteSchema":
        """Generic Front/Back schema used when introspection fails."""
        return cls(note_type=note_type, field_names=DEFAULT_FIELDS, warning=warning)


@dataclass
class AnkiNote:
    """A note ready to be sent with the addNote action."""
    deck_name: str
    model_name: str
    fields: FieldMapping
    tags: list[str] = field(default_factory=list)

    def to_params(self) -> dict:
        """Render as AnkiConnect addNote params."""
        return {
            "note": {
                "deckName": self.deck_name,
                "modelName": self.model_name,
                "fields": dict(self.fields),
                "tags": list(self.tags),
            }
        }
