"""Domain layer: templates, card data, saved cards and decks.

This package contains the core data models, free from dependencies on
rendering, UI or external services.
"""

from .card import AssetRef, CardArt, CardData, CustomSetSymbol, Deck, SavedCard
from .defaults import DEFAULT_CARD_DATA, DEFAULT_TEMPLATES
from .enums import RARITY_COLORS, CardType, Rarity
from .template import (
    BUILTIN_ELEMENTS,
    ELEMENT_FONT_ROLES,
    CustomElement,
    ElementBox,
    FontSpec,
    Template,
    TemplateElements,
)

__all__ = [
    "AssetRef",
    "BUILTIN_ELEMENTS",
    "CardArt",
    "CardData",
    "CardType",
    "CustomElement",
    "CustomSetSymbol",
    "DEFAULT_CARD_DATA",
    "DEFAULT_TEMPLATES",
    "Deck",
    "ELEMENT_FONT_ROLES",
    "ElementBox",
    "FontSpec",
    "RARITY_COLORS",
    "Rarity",
    "SavedCard",
    "Template",
    "TemplateElements",
]
