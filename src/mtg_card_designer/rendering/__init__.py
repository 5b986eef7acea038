"""Symbol tokenizer, layout renderer and rasterizer."""

from mtg_card_designer.rendering.layout import (
    CARD_HEIGHT,
    CARD_WIDTH,
    GradientNode,
    ImageNode,
    Rect,
    RenderedCard,
    SymbolRowNode,
    TextNode,
    render,
    resolve_template,
)
from mtg_card_designer.rendering.symbols import SYMBOLS, SymbolIcon, lookup_symbol
from mtg_card_designer.rendering.tokenizer import (
    SymbolSegment,
    TextSegment,
    insert_symbol,
    parse_mana_cost,
    tokenize,
)

__all__ = [
    "CARD_HEIGHT",
    "CARD_WIDTH",
    "GradientNode",
    "ImageNode",
    "Rect",
    "RenderedCard",
    "SYMBOLS",
    "SymbolIcon",
    "SymbolRowNode",
    "SymbolSegment",
    "TextNode",
    "TextSegment",
    "insert_symbol",
    "lookup_symbol",
    "parse_mana_cost",
    "render",
    "resolve_template",
    "tokenize",
]
