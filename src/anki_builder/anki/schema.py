"""Note type selection and field introspection."""

import logging

from ..core.exceptions import (
    AnkiBuilderError,
    SchemaDegradedWarning,
    SubmissionError,
)
from ..core.models import DEFAULT_NOTE_TYPE, NoteSchema
from .client import AnkiConnectClient

logger = logging.getLogger(__name__)


def choose_note_type(note_types: list[str], hint: str, default: str = DEFAULT_NOTE_TYPE) -> str:
    """First note type whose name contains `hint` (case-insensitive), else `default`."""
    needle = hint.lower()
    for name in note_types:
        if needle and needle in name.lower():
            return name
    return default


class NoteSchemaResolver:
    """Finds the note type and fields to file a card under.

    The schema is fetched on every call: note types are edited inside
    Anki and may change while a session is running.
    """

    def __init__(self, default_note_type: str = DEFAULT_NOTE_TYPE):
        self.default_note_type = default_note_type

    def resolve(self, client: AnkiConnectClient, preferred_type_hint: str) -> NoteSchema:
        """Resolve the schema for cards of a given language.

        Args:
            client: AnkiConnect client
            preferred_type_hint: Text the note type name should contain,
                usually the language name

        Returns:
            NoteSchema. If the field query fails, a Front/Back schema
            with a SchemaDegradedWarning attached.

        Raises:
            SubmissionError: If the note types could not be listed
        """
        try:
            note_types = client.model_names()
        except AnkiBuilderError as e:
            raise SubmissionError(f"Failed to get model names: {e}") from e

        note_type = choose_note_type(note_types, preferred_type_hint, self.default_note_type)
        logger.debug(f"Using note type '{note_type}' for hint '{preferred_type_hint}'")

        try:
            fields = client.model_field_names(note_type)
        except AnkiBuilderError as e:
            warning = SchemaDegradedWarning(
                f"Could not get field names for model {note_type}: {e}",
                note_type=note_type,
                cause=e,
            )
            logger.warning(f"{warning}; falling back to Front/Back fields")
            return NoteSchema.fallback(note_type, warning)

        return NoteSchema(note_type=note_type, field_names=tuple(fields))
