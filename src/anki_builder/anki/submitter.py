"""Filing display cards as Anki notes."""

import logging
from typing import Optional

from ..core.cancellation import CancellationToken
from ..core.exceptions import AnkiBuilderError, StoreUnavailableError, SubmissionError
from ..core.models import DEFAULT_FIELDS, AnkiNote, DisplayCard, FieldMapping, NoteSchema
from .client import AnkiConnectClient
from .schema import NoteSchemaResolver

logger = logging.getLogger(__name__)

AUTOMATION_TAG = "auto-generated"


def rich_field_names(language: str) -> list[str]:
    """Fields of a language-specific vocabulary note type, e.g.
    Finnish, Translation, Finnish Example, Notes."""
    return [language, "Translation", f"{language} Example", "Notes"]


def note_tags(language: str) -> list[str]:
    return [AUTOMATION_TAG, language.lower()]


def compose_back(card: DisplayCard) -> str:
    """Single-field rendering of everything except the headword."""
    return (
        f"<b>Translation:</b><br>{card.translation_block}<br><br>"
        f"<b>Examples:</b><br>{card.example_block}<br><br>"
        f"<b>Notes:</b><br>{card.notes_block}"
    )


def build_field_mapping(card: DisplayCard, schema: NoteSchema, language: str) -> FieldMapping:
    """Map card text onto the schema's fields.

    When the schema has every rich field the card is spread across them
    one-to-one. Otherwise the first field gets the headword and the
    second gets the composed back side.
    """
    rich = rich_field_names(language)
    if schema.has_fields(rich):
        return dict(zip(rich, [
            card.primary_text,
            card.translation_block,
            card.example_block,
            card.notes_block,
        ]))

    front, back = schema.field_names[:2] if len(schema.field_names) >= 2 else DEFAULT_FIELDS
    return {front: card.primary_text, back: compose_back(card)}


class NoteSubmitter:
    """Availability probe, schema resolution and note creation in one call."""

    def __init__(self, language: str, resolver: NoteSchemaResolver = None):
        self.language = language
        self.resolver = resolver or NoteSchemaResolver()

    def submit(
        self,
        client: AnkiConnectClient,
        deck_name: str,
        card: DisplayCard,
        schema: Optional[NoteSchema] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[int]:
        """Create one note for `card` in `deck_name`.

        Calling twice with the same card creates two notes; duplicate
        handling is left to Anki.

        Args:
            client: AnkiConnect client
            deck_name: Destination deck
            card: Card to file
            schema: Schema to use; resolved from the store when omitted
            cancel_token: Checked before each store call

        Returns:
            The new note id, if AnkiConnect returned one

        Raises:
            StoreUnavailableError: If the availability probe fails
            SubmissionError: If the note types could not be listed or
                the note was rejected
            CancelledError: If shutdown was requested
        """
        if cancel_token:
            cancel_token.raise_if_cancelled()

        if not client.is_available():
            raise StoreUnavailableError(f"AnkiConnect is not available at {client.url}", url=client.url)

        if schema is None:
            if cancel_token:
                cancel_token.raise_if_cancelled()
            schema = self.resolver.resolve(client, self.language)

        if not card.primary_text:
            logger.warning("Submitting card with an empty headword")

        note = AnkiNote(
            deck_name=deck_name,
            model_name=schema.note_type,
            fields=build_field_mapping(card, schema, self.language),
            tags=note_tags(self.language),
        )

        if cancel_token:
            cancel_token.raise_if_cancelled()

        try:
            note_id = client.add_note(note)
        except AnkiBuilderError as e:
            raise SubmissionError(f"Failed to add note: {e}") from e

        logger.debug(f"Added note {note_id} ({schema.note_type}) to deck '{deck_name}'")
        return note_id
