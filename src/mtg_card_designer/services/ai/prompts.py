"""Prompt text for AI art and card text generation."""

from mtg_card_designer.domain.card import CardData
from mtg_card_designer.domain.enums import CardType

POWER_LEVELS = {
    "weak": (
        "Design the card to be simple and weak, suitable for a common rarity in a "
        "draft set. Focus on flavor. A planeswalker should have simple, low-impact "
        "abilities."
    ),
    "normal": (
        "Design the card to be balanced and interesting for standard play, like a "
        "good uncommon or playable rare. A planeswalker should have 3 distinct "
        "abilities of increasing cost."
    ),
    "strong": (
        "Design the card to be powerful and impactful, suitable for competitive "
        "decks at a rare or mythic rare level. A planeswalker should have powerful, "
        "synergistic abilities, including a strong ultimate."
    ),
    "broken": (
        "Design the card to be intentionally overpowered and game-defining, "
        "something that would likely be banned. Push the limits of its mana cost. "
        "A planeswalker's abilities should generate immense value immediately."
    ),
}

PLANESWALKER_INSTRUCTIONS = """The rules text MUST define a set of loyalty abilities for the planeswalker.
    - Follow the format: "[+N]: Effect.", "[-N]: Effect.", "[0]: Effect.".
    - After all abilities, on a new line, add a suggestion for the starting loyalty in the format: "(Suggested starting loyalty: N)".
    - The costs of the abilities should make sense for the suggested starting loyalty and the overall power level."""

JSON_STRUCTURE = """{
  "rulesText": "Your generated rules text here. Use \\n for line breaks.",
  "flavorText": "Your generated flavor text here."
}"""


def art_prompt(subject: str) -> str:
    return (
        "A detailed, high-quality digital painting in the style of a Magic: The "
        f"Gathering card art. Subject: {subject}. No text, no borders."
    )


def card_text_prompt(card: CardData, power_level: str, theme: str) -> str:
    """Build the card text request for the given card context."""
    if card.card_type == CardType.CREATURE:
        context = f"- Power/Toughness: {card.power}/{card.toughness}"
        instructions = "The rules text should define abilities appropriate for a creature."
    elif card.card_type == CardType.PLANESWALKER:
        loyalty = card.loyalty or card.custom_fields.get("loyalty")
        context = f"- Current Loyalty Value (for reference): {loyalty}" if loyalty else ""
        instructions = PLANESWALKER_INSTRUCTIONS
    else:
        context = ""
        instructions = "The rules text should describe the effect of this spell or permanent."

    return f"""You are an expert Magic: The Gathering card designer.
Your task is to generate the rules text and flavor text for a custom card.

Current card details for context:
- Name: {card.name or "(Unnamed)"}
- Mana Cost: {card.mana_cost or "(No cost)"}
- Type: {card.type_line}
{context}

User's Request:
- Card Concept/Theme: "{theme}"
- Desired Power Level: {POWER_LEVELS[power_level]}

Design Instructions:
1. Create rules text that fits all the provided context.
2. {instructions}
3. Create a short, evocative flavor text.
4. The rules text must use standard MTG templating (e.g., {{T}}, {{W}}, {{2}}).
5. You MUST respond ONLY with a single, valid JSON object without any other text.

The JSON object must have this exact structure:
{JSON_STRUCTURE}
"""
