"""PNG and print-sheet PDF export."""

from .pdf import (
    CARDS_PER_PAGE,
    CardPlacement,
    build_deck_pdf,
    deck_filename,
    export_deck_pdf,
    plan_print_sheets,
)
from .png import ExportedFile, card_filename, export_card_png, render_card_image

__all__ = [
    "CARDS_PER_PAGE",
    "CardPlacement",
    "ExportedFile",
    "build_deck_pdf",
    "card_filename",
    "deck_filename",
    "export_card_png",
    "export_deck_pdf",
    "plan_print_sheets",
    "render_card_image",
]
