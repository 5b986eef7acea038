"""Paint a ``RenderedCard`` element tree into a Pillow image."""

import logging
import math
import re
from typing import Optional

import numpy as np
from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageEnhance, ImageFilter, ImageOps

from mtg_card_designer.errors import RasterizationError
from mtg_card_designer.rendering.fonts import FontRegistry
from mtg_card_designer.rendering.images import ImageLoader
from mtg_card_designer.rendering.layout import (
    GradientNode,
    ImageNode,
    Rect,
    RenderedCard,
    ResolvedFont,
    SymbolRowNode,
    TextBlock,
    TextNode,
)
from mtg_card_designer.rendering.symbols import SymbolIcon
from mtg_card_designer.rendering.tokenizer import SymbolSegment

logger = logging.getLogger(__name__)

SYMBOL_FONT = "sans-serif"
SYMBOL_OUTLINE = "#000000"
# Horizontal margin around inline symbols, in card units.
INLINE_SYMBOL_MARGIN = 1.0

_WORD_PATTERN = re.compile(r"\S+|\s+")


def _rgb(color: str) -> tuple[int, int, int]:
    return ImageColor.getrgb(color)[:3]


def apply_color_grade(image: Image.Image, saturation: float, hue: float) -> Image.Image:
    """Apply saturate() and hue-rotate() filters, keeping the alpha channel."""
    if saturation == 1.0 and hue % 360 == 0:
        return image

    alpha = image.getchannel("A")
    rgb = image.convert("RGB")
    if saturation != 1.0:
        rgb = ImageEnhance.Color(rgb).enhance(saturation)
    if hue % 360:
        h, s, v = rgb.convert("HSV").split()
        shift = round(hue / 360 * 255)
        h = h.point(lambda p: (p + shift) % 256)
        rgb = Image.merge("HSV", (h, s, v)).convert("RGB")

    graded = rgb.convert("RGBA")
    graded.putalpha(alpha)
    return graded


def linear_gradient(
    size: tuple[int, int], start_color: str, end_color: str, angle: float
) -> np.ndarray:
    """Return an RGB array for a CSS ``linear-gradient(<angle>deg, ...)``.

    0 degrees points up and angles turn clockwise, so 180 runs top to bottom.
    """
    width, height = size
    radians = math.radians(angle)
    dx, dy = math.sin(radians), -math.cos(radians)
    length = abs(width * dx) + abs(height * dy) or 1.0

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64) + 0.5
    t = ((xs - width / 2) * dx + (ys - height / 2) * dy) / length + 0.5
    t = np.clip(t, 0.0, 1.0)[..., np.newaxis]

    start = np.array(_rgb(start_color), dtype=np.float64)
    end = np.array(_rgb(end_color), dtype=np.float64)
    return start * (1.0 - t) + end * t


def round_corners(image: Image.Image, radius: float) -> Image.Image:
    """Clip the image to a rounded rectangle."""
    if radius <= 0:
        return image
    mask = Image.new("L", image.size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        (0, 0, image.width - 1, image.height - 1), radius=round(radius), fill=255
    )
    clipped = image.copy()
    clipped.putalpha(ImageChops.multiply(image.getchannel("A"), mask))
    return clipped


class CardRasterizer:
    """Draws the nodes of a rendered card back to front.

    Args:
        loader: Resolves image references (art, frame, set symbol)
        fonts: Resolves font families to Pillow fonts
    """

    def __init__(
        self,
        loader: Optional[ImageLoader] = None,
        fonts: Optional[FontRegistry] = None,
    ) -> None:
        self.loader = loader or ImageLoader()
        self.fonts = fonts or FontRegistry()
        self._symbol_cache: dict[tuple[str, int], Image.Image] = {}

    def rasterize(self, card: RenderedCard) -> Image.Image:
        """Paint ``card`` and return an RGBA image of ``card.pixel_size``.

        Raises:
            RasterizationError: If any node fails to paint
        """
        canvas = Image.new("RGBA", card.pixel_size, card.background)
        for node in card.nodes:
            painter = getattr(self, f"_paint_{node.kind}")
            try:
                layer, offset = painter(node, card.scale)
            except RasterizationError:
                raise
            except (OSError, ValueError) as e:
                raise RasterizationError(f"Failed to paint '{node.name}': {e}") from e
            if layer is not None:
                canvas = self._composite(canvas, layer, node.rect, offset)

        logger.debug(f"Rasterized {len(card.nodes)} nodes at {card.pixel_size}")
        return round_corners(canvas, card.corner_radius)

    @staticmethod
    def _box_size(rect: Rect) -> tuple[int, int]:
        return max(1, round(rect.width)), max(1, round(rect.height))

    def _composite(
        self, canvas: Image.Image, layer: Image.Image, rect: Rect, offset: int = 0
    ) -> Image.Image:
        left = round(rect.x) - offset
        top = round(rect.y) - offset
        if rect.rotation:
            # Rotate about the box centre, clockwise like CSS.
            center_x = left + layer.width / 2
            center_y = top + layer.height / 2
            layer = layer.rotate(-rect.rotation, resample=Image.BICUBIC, expand=True)
            left = round(center_x - layer.width / 2)
            top = round(center_y - layer.height / 2)

        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        overlay.paste(layer, (left, top))
        return Image.alpha_composite(canvas, overlay)

    def _paint_image(self, node: ImageNode, scale: float):
        size = self._box_size(node.rect)
        image = self.loader.load(node.source)

        if node.fit == "cover":
            layer = ImageOps.fit(image, size, Image.LANCZOS)
        elif node.fit == "contain":
            fitted = ImageOps.contain(image, size, Image.LANCZOS)
            layer = Image.new("RGBA", size, (0, 0, 0, 0))
            layer.paste(fitted, ((size[0] - fitted.width) // 2, (size[1] - fitted.height) // 2))
        else:
            layer = image.resize(size, Image.LANCZOS)

        layer = apply_color_grade(layer, node.saturation, node.hue)

        if node.glow_color and node.glow_radius > 0:
            return self._with_glow(layer, node.glow_color, node.glow_radius)
        return layer, 0

    @staticmethod
    def _with_glow(layer: Image.Image, color: str, radius: float):
        pad = math.ceil(radius * 3)
        padded = Image.new("RGBA", (layer.width + 2 * pad, layer.height + 2 * pad), (0, 0, 0, 0))
        padded.paste(layer, (pad, pad))

        silhouette = padded.getchannel("A").filter(ImageFilter.GaussianBlur(radius))
        glow = Image.new("RGBA", padded.size, _rgb(color))
        glow.putalpha(silhouette)
        return Image.alpha_composite(glow, padded), pad

    def _paint_gradient(self, node: GradientNode, scale: float):
        size = self._box_size(node.rect)
        mask = self.loader.load(node.mask_source).resize(size, Image.LANCZOS)
        mask_alpha = np.asarray(mask.getchannel("A"), dtype=np.float64) / 255.0

        rgb = linear_gradient(size, node.start_color, node.end_color, node.angle)
        alpha = np.round(mask_alpha * node.opacity * 255.0)
        pixels = np.dstack([np.round(rgb), alpha]).astype(np.uint8)
        return Image.fromarray(pixels, "RGBA"), 0

    def _paint_symbols(self, node: SymbolRowNode, scale: float):
        size = self._box_size(node.rect)
        if not node.symbols:
            return Image.new("RGBA", size, (0, 0, 0, 0)), 0

        count = len(node.symbols)
        total = count * node.symbol_size + (count - 1) * node.gap
        # Rows wider or taller than their box spill past its edges.
        pad = math.ceil(max(0.0, total - size[0], node.symbol_size - size[1]))
        layer = Image.new("RGBA", (size[0] + 2 * pad, size[1] + 2 * pad), (0, 0, 0, 0))

        if node.align == "right":
            x = size[0] - total
        elif node.align == "center":
            x = (size[0] - total) / 2
        else:
            x = 0.0
        x += pad
        y = pad + (size[1] - node.symbol_size) / 2

        for symbol in node.symbols:
            icon = self.symbol_image(symbol.icon, node.symbol_size)
            offset = symbol.icon.vertical_offset * scale
            layer.alpha_composite(icon, dest=self._dest(x, y + offset))
            x += node.symbol_size + node.gap
        return layer, pad

    @staticmethod
    def _dest(x: float, y: float) -> tuple[int, int]:
        # alpha_composite rejects negative destinations
        return max(0, round(x)), max(0, round(y))

    def symbol_image(self, icon: SymbolIcon, size: float) -> Image.Image:
        """Draw a symbol icon as a filled circle with its glyph."""
        px = max(1, round(size))
        key = (icon.key, px)
        if key in self._symbol_cache:
            return self._symbol_cache[key]

        image = Image.new("RGBA", (px, px), (0, 0, 0, 0))
        draw = ImageDraw.Draw(image)
        bounds = (0, 0, px - 1, px - 1)
        outline = max(1, round(px * 0.04))

        if icon.is_hybrid:
            draw.pieslice(bounds, 135, 315, fill=icon.fills[0])
            draw.pieslice(bounds, -45, 135, fill=icon.fills[1])
            draw.ellipse(bounds, outline=SYMBOL_OUTLINE, width=outline)
        else:
            draw.ellipse(bounds, fill=icon.fills[0], outline=SYMBOL_OUTLINE, width=outline)

        if icon.glyph:
            font = self.fonts.get(SYMBOL_FONT, px * 0.6, bold=True)
            draw.text((px / 2, px / 2), icon.glyph, fill=SYMBOL_OUTLINE, font=font, anchor="mm")

        self._symbol_cache[key] = image
        return image

    def _paint_text(self, node: TextNode, scale: float):
        size = self._box_size(node.rect)
        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        inner_width = max(1.0, size[0] - 2 * node.padding)
        margin = INLINE_SYMBOL_MARGIN * scale

        rows = []
        for block in node.blocks:
            font = self._font(block.font)
            for index, line in enumerate(block.lines):
                wrapped = self._wrap(draw, line, font, block, inner_width, margin)
                for row_index, row in enumerate(wrapped):
                    first = index == 0 and row_index == 0
                    gap = block.gap_before if first else 0.0
                    rows.append((block, font, row, gap))

        total_height = sum(block.font.line_spacing + gap for block, _, _, gap in rows)
        if node.vertical_align == "top":
            y = node.padding
        else:
            y = (size[1] - total_height) / 2

        for block, font, row, gap in rows:
            y += gap
            row_width = sum(width for _, _, width in row)
            if block.font.align == "center":
                x = node.padding + (inner_width - row_width) / 2
            elif block.font.align == "right":
                x = node.padding + inner_width - row_width
            else:
                x = node.padding
            self._draw_row(layer, draw, row, font, block, x, y, margin, scale)
            y += block.font.line_spacing
        return layer, 0

    def _font(self, font: ResolvedFont):
        return self.fonts.get(font.family, font.size, bold=font.bold, italic=font.italic)

    def _wrap(self, draw, line, font, block: TextBlock, max_width: float, margin: float):
        """Greedy word wrap; symbols wrap like words."""
        items = []
        for segment in line:
            if isinstance(segment, SymbolSegment):
                items.append(("symbol", segment, block.symbol_size + 2 * margin))
            else:
                for word in _WORD_PATTERN.findall(segment.value):
                    items.append(("text", word, draw.textlength(word, font=font)))

        rows = [[]]
        width = 0.0
        for item in items:
            is_space = item[0] == "text" and item[1].isspace()
            if rows[-1] and width + item[2] > max_width and not is_space:
                while rows[-1] and rows[-1][-1][0] == "text" and rows[-1][-1][1].isspace():
                    rows[-1].pop()
                rows.append([])
                width = 0.0
            if is_space and not rows[-1]:
                continue
            rows[-1].append(item)
            width += item[2]
        return rows

    def _draw_row(self, layer, draw, row, font, block: TextBlock, x, y, margin, scale):
        line_spacing = block.font.line_spacing
        ascent, descent = font.getmetrics()
        baseline = y + (line_spacing - (ascent + descent)) / 2 + ascent

        for kind, value, width in row:
            if kind == "text":
                draw.text((x, baseline), value, fill=block.font.color, font=font, anchor="ls")
            else:
                icon = self.symbol_image(value.icon, block.symbol_size)
                top = y + (line_spacing - block.symbol_size) / 2
                top += value.icon.vertical_offset * scale
                layer.alpha_composite(icon, dest=self._dest(x + margin, top))
            x += width


def rasterize(
    card: RenderedCard,
    loader: Optional[ImageLoader] = None,
    fonts: Optional[FontRegistry] = None,
) -> Image.Image:
    """Convenience wrapper around ``CardRasterizer``."""
    return CardRasterizer(loader, fonts).rasterize(card)
