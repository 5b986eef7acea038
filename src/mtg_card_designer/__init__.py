"""MTG Card Designer: template-driven trading card layout and export."""

__version__ = "0.1.0"

from mtg_card_designer.domain import CardData, CardType, Deck, Rarity, SavedCard, Template
from mtg_card_designer.rendering import RenderedCard, render, tokenize

__all__ = [
    "CardData",
    "CardType",
    "Deck",
    "Rarity",
    "RenderedCard",
    "SavedCard",
    "Template",
    "render",
    "tokenize",
]
