"""Tests for PNG and print-sheet PDF export."""

import io
import re

import pytest
from PIL import Image

from mtg_card_designer.domain import CardArt, Deck, SavedCard
from mtg_card_designer.errors import ExportError, InputValidationError
from mtg_card_designer.export import (
    CARDS_PER_PAGE,
    build_deck_pdf,
    card_filename,
    deck_filename,
    export_card_png,
    export_deck_pdf,
    plan_print_sheets,
    render_card_image,
)
from mtg_card_designer.export.pdf import crop_mark_segments, grid_margins, page_count

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
BROKEN_IMAGE = "data:image/png;base64,AAAA"


def make_deck(template, cards, name="Test Deck") -> Deck:
    return Deck(
        id=1,
        name=name,
        cards=[
            SavedCard(id=i + 1, deck_id=1, card_data=card, template_data=template)
            for i, card in enumerate(cards)
        ],
    )


def pdf_pages(data: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page\b", data))


class TestCardFilename:
    """Test suite for card_filename()."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Sol Ring!", "sol_ring.png"),
            ("AI Artificer", "ai_artificer.png"),
            ("  --Jace, the Mind Sculptor--  ", "jace_the_mind_sculptor.png"),
            ("Æther Vial", "ther_vial.png"),
            ("", "mtg_card.png"),
            ("!!!", "mtg_card.png"),
        ],
    )
    def test_sanitize(self, name, expected) -> None:
        """Test deriving file names from card names."""
        assert card_filename(name) == expected

    def test_extension(self) -> None:
        """Test a custom extension."""
        assert card_filename("Opt", "jpg") == "opt.jpg"


class TestPngExport:
    """Test suite for export_card_png()."""

    def test_export(self, template, creature) -> None:
        """Test a supersampled PNG export."""
        exported = export_card_png(template, creature, supersample=2)

        assert exported.filename == "ai_artificer.png"
        assert exported.data.startswith(PNG_SIGNATURE)
        assert Image.open(io.BytesIO(exported.data)).size == (750, 1050)

    def test_save(self, template, instant, tmp_path) -> None:
        """Test writing the export to disk."""
        path = export_card_png(template, instant, supersample=2).save(tmp_path / "out")
        assert path == tmp_path / "out" / "counterspell.png"
        assert path.read_bytes().startswith(PNG_SIGNATURE)

    @pytest.mark.parametrize("factor", [0, 1])
    def test_export_requires_supersampling(self, template, instant, factor) -> None:
        """Test that exports are at least 2x."""
        with pytest.raises(InputValidationError):
            export_card_png(template, instant, supersample=factor)

    def test_preview_at_nominal_size(self, template, instant) -> None:
        """Test that previews may render at 1x."""
        assert render_card_image(template, instant, supersample=1).size == (375, 525)


class TestPrintSheetLayout:
    """Test suite for the A4 grid."""

    def test_margins(self) -> None:
        """Test the centred grid margins."""
        assert grid_margins() == (40.0, -33.5)

    def test_plan(self) -> None:
        """Test placing ten cards over two pages."""
        placements = plan_print_sheets(10)

        assert [p.page for p in placements] == [0] * 8 + [1] * 2
        assert [p.slot for p in placements[:4]] == [(0, 0), (1, 0), (0, 1), (1, 1)]
        assert placements[8].slot == (0, 0)
        assert placements[9].slot == (1, 0)
        assert (placements[9].x, placements[9].y) == (107.0, -33.5)
        assert placements[7].y == pytest.approx(-33.5 + 3 * 92)

    def test_page_count(self) -> None:
        """Test rounding pages up."""
        assert page_count(1) == 1
        assert page_count(CARDS_PER_PAGE) == 1
        assert page_count(CARDS_PER_PAGE + 1) == 2

    def test_crop_marks(self) -> None:
        """Test the eight crop mark segments around a card."""
        placement = plan_print_sheets(1)[0]
        segments = crop_mark_segments(placement)

        assert len(segments) == 8
        for x1, y1, x2, y2 in segments:
            length = abs(x2 - x1) + abs(y2 - y1)
            assert length == pytest.approx(5)
        assert (35.0, -33.5, 40.0, -33.5) in segments


class TestDeckPdf:
    """Test suite for deck PDF export."""

    def test_build(self, template, creature, instant) -> None:
        """Test page count and progress reporting."""
        deck = make_deck(template, [creature, instant] * 5)
        calls = []

        data = build_deck_pdf(deck, progress=lambda i, n: calls.append((i, n)), supersample=2)

        assert data.startswith(b"%PDF")
        assert pdf_pages(data) == 2
        assert calls == [(i, 10) for i in range(1, 11)]

    def test_deck_requires_supersampling(self, template, instant) -> None:
        """Test that deck exports are at least 2x."""
        with pytest.raises(InputValidationError):
            build_deck_pdf(make_deck(template, [instant]), supersample=1)

    def test_empty_deck(self, template) -> None:
        """Test that empty decks are rejected."""
        with pytest.raises(InputValidationError):
            build_deck_pdf(make_deck(template, []))

    def test_failure_aborts_without_writing(self, template, creature, tmp_path) -> None:
        """Test that a failing card leaves any existing file untouched."""
        broken = creature.model_copy(update={"art": CardArt(cropped=BROKEN_IMAGE)})
        deck = make_deck(template, [creature, broken])
        output = tmp_path / "deck.pdf"
        output.write_bytes(b"previous")

        with pytest.raises(ExportError, match="card 2"):
            export_deck_pdf(deck, output_path=output, supersample=2)
        assert output.read_bytes() == b"previous"

    def test_export_default_path(self, template, instant) -> None:
        """Test the default file name in the output directory."""
        from mtg_card_designer.config import get_settings

        path = export_deck_pdf(make_deck(template, [instant], name="Blue Tempo"), supersample=2)
        assert path == get_settings().output_dir / "Blue_Tempo.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_deck_filename(self, template) -> None:
        """Test deck file names."""
        assert deck_filename(make_deck(template, [], name="  My  Deck ")) == "My_Deck.pdf"
        assert deck_filename(make_deck(template, [], name="   ")) == "deck.pdf"
