"""Tests for core data models."""

import pytest

from anki_builder.core.cancellation import CancellationToken
from anki_builder.core.exceptions import CancelledError, SchemaDegradedWarning
from anki_builder.core.models import (
    AnkiNote,
    DisplayCard,
    GeneratedCard,
    GenerationRequest,
    NoteSchema,
)


class TestGeneratedCard:
    """Tests for GeneratedCard model."""

    def test_defaults(self):
        """Test that every field defaults to empty."""
        card = GeneratedCard()
        assert card.headword == ""
        assert card.translations == []
        assert card.is_empty

    def test_independent_lists(self):
        """Test default lists are not shared between instances."""
        a = GeneratedCard()
        b = GeneratedCard()
        a.translations.append("cat")
        assert b.translations == []

    def test_not_empty(self):
        assert not GeneratedCard(notes=["x"]).is_empty


class TestFrozenModels:
    """Tests for immutable models."""

    def test_request_frozen(self):
        request = GenerationRequest("kissa")
        with pytest.raises(AttributeError):
            request.phrase = "koira"

    def test_display_card_frozen(self):
        card = DisplayCard("kissa", "- cat", "", "")
        with pytest.raises(AttributeError):
            card.primary_text = "koira"


class TestNoteSchema:
    """Tests for NoteSchema model."""

    def test_has_fields(self):
        schema = NoteSchema("Finnish", ("Finnish", "Translation", "Notes"))
        assert schema.has_fields(["Finnish", "Notes"])
        assert not schema.has_fields(["Finnish", "Finnish Example"])

    def test_fallback(self):
        warning = SchemaDegradedWarning("no fields", note_type="Finnish")
        schema = NoteSchema.fallback("Finnish", warning)
        assert schema.field_names == ("Front", "Back")
        assert schema.degraded
        assert schema.warning is warning

    def test_not_degraded(self):
        assert not NoteSchema("Basic", ("Front", "Back")).degraded


class TestAnkiNote:
    """Tests for AnkiNote model."""

    def test_to_params(self):
        note = AnkiNote(
            deck_name="Suomi",
            model_name="Basic",
            fields={"Front": "kissa", "Back": "cat"},
            tags=["auto-generated", "finnish"],
        )
        assert note.to_params() == {
            "note": {
                "deckName": "Suomi",
                "modelName": "Basic",
                "fields": {"Front": "kissa", "Back": "cat"},
                "tags": ["auto-generated", "finnish"],
            }
        }


class TestCancellationToken:
    """Tests for the shutdown flag."""

    def test_write_once(self):
        token = CancellationToken()
        assert not token.cancelled
        assert token.cancel("SIGINT")
        assert not token.cancel("SIGTERM")
        assert token.cancelled
        assert token.reason == "SIGINT"

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled()
        token.cancel("SIGTERM")
        with pytest.raises(CancelledError) as exc_info:
            token.raise_if_cancelled()
        assert "SIGTERM" in str(exc_info.value)
