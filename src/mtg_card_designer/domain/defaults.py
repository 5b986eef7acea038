"""Built-in templates and the card a new session starts with."""

from mtg_card_designer.domain.card import CardArt, CardData
from mtg_card_designer.domain.enums import CardType, Rarity
from mtg_card_designer.domain.template import Template

_STANDARD_ELEMENTS = {
    "title": {"x": 5.5, "y": 5, "width": 55, "height": 6},
    "manaCost": {"x": 62, "y": 5, "width": 32, "height": 6},
    "art": {"x": 4.5, "y": 12, "width": 91, "height": 46},
    "typeLine": {"x": 5.5, "y": 59, "width": 75, "height": 6},
    "setSymbol": {"x": 84.5, "y": 59.5, "width": 10, "height": 5},
    "textBox": {"x": 5.5, "y": 66, "width": 89, "height": 26},
    "ptBox": {"x": 78, "y": 88.5, "width": 16, "height": 6},
    "collectorNumber": {"x": 5, "y": 94, "width": 40, "height": 3},
    "artist": {"x": 50, "y": 94, "width": 45, "height": 3},
}


def _fonts(color: str) -> dict:
    beleren = "Beleren, sans-serif"
    plantin = "MPlantin, serif"
    return {
        "title": {"fontFamily": beleren, "fontSize": 18, "color": color, "textAlign": "left", "fontWeight": "bold"},
        "typeLine": {"fontFamily": beleren, "fontSize": 16, "color": color, "textAlign": "left", "fontWeight": "bold"},
        "rulesText": {"fontFamily": plantin, "fontSize": 15, "color": color, "textAlign": "left", "fontWeight": "normal"},
        "flavorText": {"fontFamily": plantin, "fontSize": 14, "color": color, "textAlign": "left", "fontStyle": "italic", "fontWeight": "normal"},
        "pt": {"fontFamily": beleren, "fontSize": 19, "color": color, "textAlign": "center", "fontWeight": "bold"},
        "collectorNumber": {"fontFamily": plantin, "fontSize": 10, "color": color, "textAlign": "left", "fontWeight": "normal"},
        "artist": {"fontFamily": beleren, "fontSize": 10, "color": color, "textAlign": "right", "fontWeight": "normal"},
    }


# Light card base so the black text stays legible without a frame image.
MODERN_TEMPLATE = Template.model_validate(
    {
        "id": "modern",
        "name": "Modern",
        "elements": _STANDARD_ELEMENTS,
        "backgroundColor": "#E8E2D0",
        "fonts": _fonts("#000000"),
    }
)

# Full-bleed art under a light-on-dark text scheme.
SHOWCASE_TEMPLATE = Template.model_validate(
    {
        "id": "showcase",
        "name": "Showcase",
        "elements": {
            **_STANDARD_ELEMENTS,
            "art": {"x": 0, "y": 0, "width": 100, "height": 65},
        },
        "fonts": _fonts("#FFFFFF"),
    }
)

DEFAULT_TEMPLATES = (MODERN_TEMPLATE, SHOWCASE_TEMPLATE)

DEFAULT_CARD_DATA = CardData(
    name="AI Artificer",
    mana_cost="{2}{U}{U}",
    art=CardArt(),
    card_type=CardType.CREATURE,
    subtype="Human Artificer",
    rules_text=(
        "When AI Artificer enters the battlefield, you may create a 1/1 colorless "
        "Thopter artifact creature token with flying.\n{T}: Add {C}."
    ),
    flavor_text=(
        '"My creations are not merely tools; they are extensions of my will, '
        'given form by logic and light."'
    ),
    power="2",
    toughness="3",
    rarity=Rarity.RARE,
    artist="Gemini Engine",
    collector_number="042/250",
    template_id="modern",
)
