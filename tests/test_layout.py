"""Tests for the layout renderer."""

import pytest

from mtg_card_designer.domain import CardData, CustomElement, ElementBox, Rarity, Template
from mtg_card_designer.domain.defaults import DEFAULT_TEMPLATES
from mtg_card_designer.errors import TemplateNotResolvedError
from mtg_card_designer.rendering.layout import (
    CARD_HEIGHT,
    CARD_WIDTH,
    GradientNode,
    ImageNode,
    SymbolRowNode,
    TextNode,
    render,
    resolve_template,
)
from mtg_card_designer.rendering.tokenizer import SymbolSegment, TextSegment


def _text(node: TextNode) -> str:
    return "".join(seg.value for seg in node.lines[0] if isinstance(seg, TextSegment))


class TestRender:
    """Test suite for render()."""

    def test_default_card_elements(self, template: Template, creature: CardData) -> None:
        """Test which nodes a plain creature produces."""
        rendered = render(template, creature)
        assert rendered.names() == [
            "title",
            "manaCost",
            "typeLine",
            "textBox",
            "ptBox",
            "collectorNumber",
            "artist",
        ]
        assert rendered.width == CARD_WIDTH
        assert rendered.height == CARD_HEIGHT
        assert rendered.corner_radius == 18

    def test_formatted_text(self, template: Template, creature: CardData) -> None:
        """Test title, type line, P/T and artist strings."""
        rendered = render(template, creature)
        assert _text(rendered.find("title")) == "AI Artificer"
        assert _text(rendered.find("typeLine")) == "Creature — Human Artificer"
        assert _text(rendered.find("ptBox")) == "2 / 3"
        assert _text(rendered.find("artist")) == "Illus. Gemini Engine"

    def test_hidden_title_omitted(self, template: Template, creature: CardData) -> None:
        """Test that an explicitly hidden element is not in the tree."""
        box = template.elements.title.model_copy(update={"visible": False})
        rendered = render(template.with_element("title", box), creature)
        assert "title" not in rendered

    def test_no_pt_box_for_non_creatures(self, template: Template, instant: CardData) -> None:
        """Test that only creatures get a P/T box."""
        assert "ptBox" not in render(template, instant)

    def test_hidden_pt_box_for_creature(self, template: Template, creature: CardData) -> None:
        """Test that visibility still gates the P/T box."""
        box = template.elements.pt_box.model_copy(update={"visible": False})
        assert "ptBox" not in render(template.with_element("ptBox", box), creature)

    def test_gradient_present(self, framed_template: Template, creature: CardData) -> None:
        """Test the masked gradient node and its stacking position."""
        rendered = render(framed_template, creature)
        gradient = rendered.find("gradientOverlay")
        assert isinstance(gradient, GradientNode)
        assert gradient.z == 2
        assert gradient.mask_source == framed_template.frame_image
        assert rendered.names()[:2] == ["frame", "gradientOverlay"]

    def test_gradient_absent_without_end_color(
        self, framed_template: Template, creature: CardData
    ) -> None:
        """Test that a missing end color removes the gradient."""
        template = framed_template.model_copy(update={"gradient_end_color": None})
        rendered = render(template, creature)
        assert "gradientOverlay" not in rendered
        assert "frame" in rendered

    def test_gradient_absent_without_frame(
        self, framed_template: Template, creature: CardData
    ) -> None:
        """Test that both colors without a frame image give no gradient."""
        template = framed_template.model_copy(update={"frame_image": ""})
        assert template.gradient_start_color and template.gradient_end_color
        rendered = render(template, creature)
        assert "gradientOverlay" not in rendered
        assert "frame" not in rendered

    @pytest.mark.parametrize("angle", [0.0, 45.0, 270.0])
    def test_gradient_angle_keeps_overlay(
        self, framed_template: Template, creature: CardData, angle: float
    ) -> None:
        """Test that changing the angle alone never toggles the gradient."""
        template = framed_template.model_copy(update={"gradient_angle": angle})
        gradient = render(template, creature).find("gradientOverlay")
        assert isinstance(gradient, GradientNode)
        assert gradient.angle == angle

    def test_frame_carries_color_grade(self, framed_template: Template, creature: CardData) -> None:
        """Test saturation and hue on the frame node."""
        template = framed_template.model_copy(update={"saturation": 1.5, "hue": 90})
        frame = render(template, creature).find("frame")
        assert isinstance(frame, ImageNode)
        assert frame.saturation == 1.5
        assert frame.hue == 90

    def test_z_order(self, framed_template: Template, creature: CardData, image_uri) -> None:
        """Test that nodes are sorted back to front."""
        card = creature.updated(
            art={"original": "x", "cropped": image_uri()},
            set_symbol_url=image_uri(),
        )
        rendered = render(framed_template, card)
        zs = [node.z for node in rendered.nodes]
        assert zs == sorted(zs)
        assert rendered.nodes[0].name == "art"
        assert rendered.names().index("setSymbol") > rendered.names().index("typeLine")

    def test_art_omitted_without_cropped_image(self, template: Template, creature: CardData) -> None:
        """Test that art needs a cropped reference."""
        card = creature.updated(art={"original": "original.png", "cropped": ""})
        assert "art" not in render(template, card)

    def test_set_symbol_glow_by_rarity(self, template: Template, creature: CardData) -> None:
        """Test the drop-shadow color of the set symbol."""
        card = creature.updated(set_symbol_url="symbol.png", rarity=Rarity.MYTHIC)
        node = render(template, card).find("setSymbol")
        assert node.glow_color == "#FF8000"

    def test_mana_cost_row(self, template: Template, creature: CardData) -> None:
        """Test the symbol row built from the mana cost."""
        node = render(template, creature.updated(mana_cost="{2}{W}{U}")).find("manaCost")
        assert isinstance(node, SymbolRowNode)
        assert [s.key for s in node.symbols] == ["2", "W", "U"]
        assert node.symbol_size == 24
        assert node.align == "right"

    def test_rules_text_lines(self, template: Template, creature: CardData) -> None:
        """Test that rules text is split per line and tokenized."""
        card = creature.updated(rules_text="Flying\n{T}: Add {G}.", flavor_text="")
        text_box = render(template, card).find("textBox")
        assert len(text_box.blocks) == 1
        first, second = text_box.blocks[0].lines
        assert first == (TextSegment("Flying"),)
        assert [type(seg) for seg in second] == [
            SymbolSegment,
            TextSegment,
            SymbolSegment,
            TextSegment,
        ]
        assert second[0].key == "T"
        assert second[2].key == "G"

    def test_flavor_text_stacked_below(self, template: Template, creature: CardData) -> None:
        """Test the flavor text block under the rules text."""
        text_box = render(template, creature).find("textBox")
        rules, flavor = text_box.blocks
        assert rules.font.family == template.fonts["rulesText"].font_family
        assert flavor.font.italic
        assert flavor.gap_before == 8
        assert text_box.padding == 5

    def test_scale(self, template: Template, creature: CardData) -> None:
        """Test that boxes and font sizes scale uniformly."""
        base = render(template, creature)
        double = render(template, creature, scale=2)
        assert double.pixel_size == (750, 1050)
        assert double.find("title").rect.width == pytest.approx(base.find("title").rect.width * 2)
        assert double.find("title").blocks[0].font.size == 36
        assert double.find("manaCost").symbol_size == 48

    def test_box_from_percentages(self, template: Template, creature: CardData) -> None:
        """Test converting percentage boxes to pixels."""
        rect = render(template, creature).find("textBox").rect
        assert rect.x == pytest.approx(5.5 / 100 * 375)
        assert rect.y == pytest.approx(66 / 100 * 525)
        assert rect.height == pytest.approx(26 / 100 * 525)

    def test_custom_element(self, template: Template, creature: CardData) -> None:
        """Test custom elements render only with a non-empty field."""
        element = CustomElement(
            key="loyaltyBox",
            data_field="loyalty",
            font_role="pt",
            box=ElementBox(x=80, y=88, width=15, height=6),
        )
        custom = template.with_custom_element(element)

        assert "loyaltyBox" not in render(custom, creature)

        card = creature.updated(custom_fields={"loyalty": "{X}"})
        rendered = render(custom, card)
        assert rendered.names()[-1] == "loyaltyBox"
        assert rendered.find("loyaltyBox").lines[0][0].key == "X"

    def test_render_is_deterministic(self, template: Template, creature: CardData) -> None:
        """Test that equal inputs give equal trees."""
        assert render(template, creature) == render(template, creature)

    def test_no_template(self, creature: CardData) -> None:
        """Test that a missing template is an error, not a blank card."""
        with pytest.raises(TemplateNotResolvedError):
            render(None, creature)

    def test_invalid_scale(self, template: Template, creature: CardData) -> None:
        """Test rejecting a non-positive scale."""
        with pytest.raises(ValueError):
            render(template, creature, scale=0)


class TestResolveTemplate:
    """Test suite for resolve_template()."""

    def test_resolve_known_id(self) -> None:
        """Test resolving a built-in template."""
        assert resolve_template(DEFAULT_TEMPLATES, "showcase").name == "Showcase"

    def test_unknown_id(self) -> None:
        """Test that unknown ids never fall back silently."""
        with pytest.raises(TemplateNotResolvedError) as excinfo:
            resolve_template(DEFAULT_TEMPLATES, "missing")
        assert excinfo.value.template_id == "missing"
