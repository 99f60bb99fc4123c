"""
Anki Builder - Turn foreign-language words into Anki vocabulary cards.

An LLM writes translations, example sentences and notes for each phrase,
and the card is filed into Anki through AnkiConnect, adapting to the
note type's fields.
"""

__version__ = "0.1.0"
