"""Single-card PNG export."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

from mtg_card_designer.config import get_settings
from mtg_card_designer.domain.card import CardData
from mtg_card_designer.domain.template import Template
from mtg_card_designer.errors import InputValidationError
from mtg_card_designer.rendering.images import image_to_bytes
from mtg_card_designer.rendering.layout import render
from mtg_card_designer.rendering.rasterizer import CardRasterizer

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "mtg_card"
# Exports are always supersampled; factor 1 is for on-screen previews only.
MIN_EXPORT_SUPERSAMPLE = 2


def card_filename(name: str, extension: str = "png") -> str:
    """Filesystem-safe file name derived from a card name.

    >>> card_filename("Sol Ring!")
    'sol_ring.png'
    """
    stem = re.sub(r"[^a-zA-Z0-9]+", "_", name).strip("_").lower()
    return f"{stem or DEFAULT_FILENAME}.{extension}"


def check_export_supersample(supersample: int) -> None:
    if supersample < MIN_EXPORT_SUPERSAMPLE:
        raise InputValidationError(
            f"Export supersample factor must be at least {MIN_EXPORT_SUPERSAMPLE}, got {supersample}"
        )


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    data: bytes

    def save(self, directory: Optional[Path] = None) -> Path:
        directory = directory or get_settings().output_dir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.data)
        logger.info(f"Saved {path}")
        return path


def render_card_image(
    template: Optional[Template],
    card: CardData,
    supersample: int = 2,
    rasterizer: Optional[CardRasterizer] = None,
) -> Image.Image:
    """Lay out and rasterize one card at ``supersample`` times nominal size."""
    if supersample < 1:
        raise InputValidationError(f"Supersample factor must be at least 1, got {supersample}")
    rendered = render(template, card, scale=supersample)
    return (rasterizer or CardRasterizer()).rasterize(rendered)


def export_card_png(
    template: Optional[Template],
    card: CardData,
    supersample: int = 2,
    rasterizer: Optional[CardRasterizer] = None,
) -> ExportedFile:
    """Render ``card`` on ``template`` and encode it as PNG."""
    check_export_supersample(supersample)
    image = render_card_image(template, card, supersample, rasterizer)
    filename = card_filename(card.name)
    logger.info(f"Exported '{card.name}' as {filename} ({image.width}x{image.height})")
    return ExportedFile(filename=filename, data=image_to_bytes(image, "PNG"))
