"""Layout renderer: template + card data -> absolute element tree.

``render`` is a pure function. The same template, card and scale always
produce an equal ``RenderedCard``; the live preview and every export path
paint from this tree so they cannot drift apart.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Union

from mtg_card_designer.domain.card import CardData
from mtg_card_designer.domain.template import ElementBox, FontSpec, Template
from mtg_card_designer.errors import TemplateNotResolvedError
from mtg_card_designer.rendering.tokenizer import (
    Segment,
    SymbolSegment,
    TextSegment,
    parse_mana_cost,
    tokenize,
)

logger = logging.getLogger(__name__)

# Nominal card size in units; every template percentage is relative to it.
CARD_WIDTH = 375
CARD_HEIGHT = 525
CORNER_RADIUS = 18

TEXT_BOX_PADDING = 5
FLAVOR_GAP = 8
MANA_SYMBOL_SIZE = 24
MANA_SYMBOL_GAP = 2
INLINE_SYMBOL_SIZE = 16
SET_SYMBOL_GLOW = 2
LINE_HEIGHT = 1.2

Z_ART = 0
Z_FRAME = 1
Z_GRADIENT = 2
Z_TEXT = 3

# Stacking order of the z=3 layer.
TEXT_LAYER_ORDER = (
    "title",
    "manaCost",
    "typeLine",
    "setSymbol",
    "textBox",
    "ptBox",
    "collectorNumber",
    "artist",
)


@dataclass(frozen=True)
class Rect:
    """Absolute box in output pixels."""

    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0

    @classmethod
    def from_box(cls, box: ElementBox, card_width: float, card_height: float) -> "Rect":
        return cls(
            x=box.x / 100 * card_width,
            y=box.y / 100 * card_height,
            width=box.width / 100 * card_width,
            height=box.height / 100 * card_height,
            rotation=box.rotation,
        )


@dataclass(frozen=True)
class ResolvedFont:
    family: str
    size: float
    color: str
    align: str = "left"
    italic: bool = False
    bold: bool = False
    line_height: float = LINE_HEIGHT

    @property
    def line_spacing(self) -> float:
        return self.size * self.line_height

    @classmethod
    def from_spec(cls, spec: FontSpec, scale: float) -> "ResolvedFont":
        return cls(
            family=spec.font_family,
            size=spec.font_size * scale,
            color=spec.color,
            align=spec.text_align,
            italic=spec.italic,
            bold=spec.bold,
        )


Line = tuple[Segment, ...]


@dataclass(frozen=True)
class TextBlock:
    """Lines set in one font; ``gap_before`` separates stacked blocks."""

    font: ResolvedFont
    lines: tuple[Line, ...]
    symbol_size: float
    gap_before: float = 0.0


@dataclass(frozen=True)
class ImageNode:
    name: str
    rect: Rect
    z: int
    source: str
    fit: str = "cover"
    saturation: float = 1.0
    hue: float = 0.0
    glow_color: Optional[str] = None
    glow_radius: float = 0.0
    kind: str = "image"


@dataclass(frozen=True)
class GradientNode:
    """Linear gradient clipped to the opaque pixels of ``mask_source``."""

    name: str
    rect: Rect
    z: int
    start_color: str
    end_color: str
    angle: float
    opacity: float
    mask_source: str
    kind: str = "gradient"


@dataclass(frozen=True)
class SymbolRowNode:
    name: str
    rect: Rect
    z: int
    symbols: tuple[SymbolSegment, ...]
    symbol_size: float
    gap: float
    align: str = "right"
    kind: str = "symbols"


@dataclass(frozen=True)
class TextNode:
    name: str
    rect: Rect
    z: int
    blocks: tuple[TextBlock, ...]
    padding: float = 0.0
    vertical_align: str = "center"
    kind: str = "text"

    @property
    def lines(self) -> tuple[Line, ...]:
        """All lines of all blocks, top to bottom."""
        return tuple(line for block in self.blocks for line in block.lines)


RenderNode = Union[ImageNode, GradientNode, SymbolRowNode, TextNode]


@dataclass(frozen=True)
class RenderedCard:
    """The element tree a paint surface or exporter draws, back to front."""

    template_id: str
    width: float
    height: float
    scale: float
    corner_radius: float
    nodes: tuple[RenderNode, ...]
    background: str = "#000000"

    def find(self, name: str) -> Optional[RenderNode]:
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def names(self) -> list[str]:
        return [node.name for node in self.nodes]

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

    @property
    def pixel_size(self) -> tuple[int, int]:
        return round(self.width), round(self.height)


def resolve_template(templates: Iterable[Template], template_id: str) -> Template:
    """Find the template for ``template_id``; never falls back to another."""
    for template in templates:
        if template.id == template_id:
            return template
    raise TemplateNotResolvedError(template_id)


def text_lines(text: str) -> tuple[Line, ...]:
    """Split on newlines and tokenize each line on its own."""
    if not text:
        return ()
    return tuple(tuple(tokenize(line)) for line in text.split("\n"))


def _plain_lines(text: str) -> tuple[Line, ...]:
    if not text:
        return ()
    return ((TextSegment(value=text),),)


class _LayoutContext:
    """Per-call helpers; holds nothing beyond the inputs of one render."""

    def __init__(self, template: Template, card: CardData, scale: float):
        self.template = template
        self.card = card
        self.scale = scale
        self.width = CARD_WIDTH * scale
        self.height = CARD_HEIGHT * scale

    def rect(self, box: ElementBox) -> Rect:
        return Rect.from_box(box, self.width, self.height)

    def font(self, role: str) -> ResolvedFont:
        return ResolvedFont.from_spec(self.template.fonts[role], self.scale)

    def text_node(
        self,
        name: str,
        box: ElementBox,
        role: str,
        lines: tuple[Line, ...],
    ) -> TextNode:
        block = TextBlock(
            font=self.font(role),
            lines=lines,
            symbol_size=INLINE_SYMBOL_SIZE * self.scale,
        )
        return TextNode(name=name, rect=self.rect(box), z=Z_TEXT, blocks=(block,))

    def build(self, name: str, box: ElementBox) -> Optional[RenderNode]:
        card = self.card
        if name == "title":
            return self.text_node(name, box, "title", _plain_lines(card.name))
        if name == "manaCost":
            return SymbolRowNode(
                name=name,
                rect=self.rect(box),
                z=Z_TEXT,
                symbols=tuple(parse_mana_cost(card.mana_cost)),
                symbol_size=MANA_SYMBOL_SIZE * self.scale,
                gap=MANA_SYMBOL_GAP * self.scale,
            )
        if name == "typeLine":
            return self.text_node(name, box, "typeLine", _plain_lines(card.type_line))
        if name == "setSymbol":
            if not card.set_symbol_url:
                return None
            return ImageNode(
                name=name,
                rect=self.rect(box),
                z=Z_TEXT,
                source=card.set_symbol_url,
                fit="contain",
                glow_color=card.rarity.glow_color,
                glow_radius=SET_SYMBOL_GLOW * self.scale,
            )
        if name == "textBox":
            return self.text_box(box)
        if name == "ptBox":
            if not card.is_creature:
                return None
            text = f"{card.power} / {card.toughness}"
            return self.text_node(name, box, "pt", _plain_lines(text))
        if name == "collectorNumber":
            return self.text_node(
                name, box, "collectorNumber", _plain_lines(card.collector_number)
            )
        if name == "artist":
            return self.text_node(name, box, "artist", _plain_lines(f"Illus. {card.artist}"))
        raise KeyError(f"No layout rule for element: {name}")

    def text_box(self, box: ElementBox) -> TextNode:
        symbol_size = INLINE_SYMBOL_SIZE * self.scale
        blocks = [
            TextBlock(
                font=self.font("rulesText"),
                lines=text_lines(self.card.rules_text),
                symbol_size=symbol_size,
            )
        ]
        if self.card.flavor_text:
            blocks.append(
                TextBlock(
                    font=self.font("flavorText"),
                    lines=text_lines(self.card.flavor_text),
                    symbol_size=symbol_size,
                    gap_before=FLAVOR_GAP * self.scale,
                )
            )
        return TextNode(
            name="textBox",
            rect=self.rect(box),
            z=Z_TEXT,
            blocks=tuple(blocks),
            padding=TEXT_BOX_PADDING * self.scale,
            vertical_align="top",
        )


def render(
    template: Optional[Template], card: CardData, scale: float = 1.0
) -> RenderedCard:
    """Compute the element tree for ``card`` laid out on ``template``.

    Args:
        template: The resolved template; ``None`` means none was found
        card: The card content
        scale: Uniform output scale (1.0 = 375x525 px)

    Returns:
        The rendered card, nodes ordered back to front

    Raises:
        TemplateNotResolvedError: If no template was supplied
    """
    if template is None:
        raise TemplateNotResolvedError(card.template_id or None)
    if scale <= 0:
        raise ValueError(f"Scale must be positive, got {scale}")

    ctx = _LayoutContext(template, card, scale)
    nodes: list[RenderNode] = []

    art_box = template.elements.art
    if art_box.is_visible and card.art.cropped:
        nodes.append(
            ImageNode(
                name="art",
                rect=ctx.rect(art_box),
                z=Z_ART,
                source=card.art.cropped,
                fit="cover",
            )
        )

    full_card = Rect(0, 0, ctx.width, ctx.height)
    if template.frame_image:
        nodes.append(
            ImageNode(
                name="frame",
                rect=full_card,
                z=Z_FRAME,
                source=template.frame_image,
                fit="fill",
                saturation=template.saturation,
                hue=template.hue,
            )
        )

    if template.has_gradient:
        nodes.append(
            GradientNode(
                name="gradientOverlay",
                rect=full_card,
                z=Z_GRADIENT,
                start_color=template.gradient_start_color,
                end_color=template.gradient_end_color,
                angle=template.gradient_angle,
                opacity=template.gradient_opacity,
                mask_source=template.frame_image,
            )
        )

    for name in TEXT_LAYER_ORDER:
        box = template.elements.get(name)
        if not box.is_visible:
            continue
        node = ctx.build(name, box)
        if node is not None:
            nodes.append(node)

    for element in template.custom_elements:
        if not element.box.is_visible:
            continue
        value = card.custom_fields.get(element.data_field, "")
        if not value.strip():
            continue
        nodes.append(ctx.text_node(element.key, element.box, element.font_role, text_lines(value)))

    logger.debug(
        f"Rendered card '{card.name}' on template '{template.id}' "
        f"at scale {scale}: {len(nodes)} nodes"
    )
    return RenderedCard(
        template_id=template.id,
        width=ctx.width,
        height=ctx.height,
        scale=scale,
        corner_radius=CORNER_RADIUS * scale,
        nodes=tuple(nodes),
        background=template.background_color,
    )
