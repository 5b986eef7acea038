"""Deck export as an A4 print sheet PDF with crop marks."""

import io
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from mtg_card_designer.config import get_settings
from mtg_card_designer.domain.card import Deck
from mtg_card_designer.errors import (
    ExportError,
    InputValidationError,
    RasterizationError,
    TemplateNotResolvedError,
)
from mtg_card_designer.export.png import check_export_supersample, render_card_image
from mtg_card_designer.rendering.rasterizer import CardRasterizer

logger = logging.getLogger(__name__)

A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297
CARD_WIDTH_MM = 63
CARD_HEIGHT_MM = 88
GUTTER_MM = 4
CROP_MARK_LENGTH_MM = 5
CROP_MARK_WIDTH_MM = 0.1
COLUMNS = 2
ROWS = 4
CARDS_PER_PAGE = COLUMNS * ROWS

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class CardPlacement:
    """Where one card goes, in mm from the top-left of its page."""

    index: int
    page: int
    column: int
    row: int
    x: float
    y: float
    width: float = CARD_WIDTH_MM
    height: float = CARD_HEIGHT_MM

    @property
    def slot(self) -> tuple[int, int]:
        return self.column, self.row


def grid_margins() -> tuple[float, float]:
    """Left and top margins that centre the card grid on the page."""
    grid_width = COLUMNS * CARD_WIDTH_MM + (COLUMNS - 1) * GUTTER_MM
    grid_height = ROWS * CARD_HEIGHT_MM + (ROWS - 1) * GUTTER_MM
    return (A4_WIDTH_MM - grid_width) / 2, (A4_HEIGHT_MM - grid_height) / 2


def plan_print_sheets(count: int) -> list[CardPlacement]:
    """Place ``count`` cards on pages, filling rows left to right."""
    margin_x, margin_y = grid_margins()
    placements = []
    for index in range(count):
        page, on_page = divmod(index, CARDS_PER_PAGE)
        row, column = divmod(on_page, COLUMNS)
        placements.append(
            CardPlacement(
                index=index,
                page=page,
                column=column,
                row=row,
                x=margin_x + column * (CARD_WIDTH_MM + GUTTER_MM),
                y=margin_y + row * (CARD_HEIGHT_MM + GUTTER_MM),
            )
        )
    return placements


def page_count(count: int) -> int:
    return -(-count // CARDS_PER_PAGE)


def crop_mark_segments(
    placement: CardPlacement, length: float = CROP_MARK_LENGTH_MM
) -> list[tuple[float, float, float, float]]:
    """The 8 crop mark lines of a card, top-down mm coordinates."""
    x, y = placement.x, placement.y
    right, bottom = x + placement.width, y + placement.height
    return [
        (x - length, y, x, y),
        (x, y - length, x, y),
        (right, y, right + length, y),
        (right, y - length, right, y),
        (x - length, bottom, x, bottom),
        (x, bottom, x, bottom + length),
        (right, bottom, right + length, bottom),
        (right, bottom, right, bottom + length),
    ]


def draw_crop_marks(pdf: canvas.Canvas, placement: CardPlacement) -> None:
    pdf.setLineWidth(CROP_MARK_WIDTH_MM * mm)
    pdf.setStrokeColorRGB(0, 0, 0)
    for x1, y1, x2, y2 in crop_mark_segments(placement):
        # reportlab's origin is bottom-left
        pdf.line(x1 * mm, (A4_HEIGHT_MM - y1) * mm, x2 * mm, (A4_HEIGHT_MM - y2) * mm)


def deck_filename(deck: Deck) -> str:
    stem = re.sub(r"\s+", "_", deck.name.strip())
    return f"{stem or 'deck'}.pdf"


def build_deck_pdf(
    deck: Deck,
    progress: Optional[ProgressCallback] = None,
    supersample: Optional[int] = None,
    rasterizer: Optional[CardRasterizer] = None,
) -> bytes:
    """Rasterize every card of ``deck`` and lay them out as PDF pages.

    Each card is drawn with the template snapshot it was saved with.

    Raises:
        ExportError: If any card fails to render; nothing is returned
    """
    if not deck.cards:
        raise InputValidationError(f"Deck '{deck.name}' has no cards to export")

    supersample = supersample or get_settings().export_supersample
    check_export_supersample(supersample)
    rasterizer = rasterizer or CardRasterizer()
    total = len(deck.cards)
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(A4_WIDTH_MM * mm, A4_HEIGHT_MM * mm))
    pdf.setTitle(deck.name)

    current_page = 0
    for placement, saved in zip(plan_print_sheets(total), deck.cards):
        if placement.page != current_page:
            pdf.showPage()
            current_page = placement.page

        if progress:
            progress(placement.index + 1, total)

        try:
            image = render_card_image(
                saved.template_data, saved.card_data, supersample, rasterizer
            )
        except (RasterizationError, TemplateNotResolvedError) as e:
            raise ExportError(
                f"Failed to render card {placement.index + 1} "
                f"('{saved.card_data.name}'): {e}"
            ) from e

        pdf.drawImage(
            ImageReader(image),
            placement.x * mm,
            (A4_HEIGHT_MM - placement.y - placement.height) * mm,
            width=placement.width * mm,
            height=placement.height * mm,
            mask="auto",
        )
        draw_crop_marks(pdf, placement)

    pdf.showPage()
    pdf.save()
    logger.info(f"Built PDF for deck '{deck.name}': {total} cards, {page_count(total)} pages")
    return buffer.getvalue()


def export_deck_pdf(
    deck: Deck,
    output_path: Optional[Path] = None,
    progress: Optional[ProgressCallback] = None,
    supersample: Optional[int] = None,
    rasterizer: Optional[CardRasterizer] = None,
) -> Path:
    """Build the deck PDF and write it once the whole document is ready."""
    data = build_deck_pdf(deck, progress=progress, supersample=supersample, rasterizer=rasterizer)
    if output_path is None:
        output_path = get_settings().output_dir / deck_filename(deck)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
    except OSError as e:
        raise ExportError(f"Cannot write {output_path}: {e}") from e
    logger.info(f"Saved {output_path}")
    return output_path
