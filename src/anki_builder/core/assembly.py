"""Turn parsed card data into note field text."""

from .models import GeneratedCard, DisplayCard

# Anki renders fields as HTML
LINE_BREAK = "<br>"
BULLET = "- "


def format_translations(translations: list[str]) -> str:
    """Lower-case and bullet each translation, one per line."""
    return LINE_BREAK.join(BULLET + t.lower() for t in translations)


def join_lines(items: list[str]) -> str:
    return LINE_BREAK.join(items)


def assemble_card(card: GeneratedCard) -> DisplayCard:
    """Build the display card for a parsed card.

    Pure function: the same input always gives the same output.
    """
    return DisplayCard(
        primary_text=card.headword,
        translation_block=format_translations(card.translations),
        example_block=join_lines(card.examples),
        notes_block=join_lines(card.notes),
    )
