"""Enumerations for card types and rarities."""

from enum import Enum


class CardType(str, Enum):
    """Enumeration of Magic card types."""

    CREATURE = "Creature"
    INSTANT = "Instant"
    SORCERY = "Sorcery"
    ARTIFACT = "Artifact"
    ENCHANTMENT = "Enchantment"
    LAND = "Land"
    PLANESWALKER = "Planeswalker"

    def __str__(self) -> str:
        return self.value


class Rarity(str, Enum):
    """Enumeration of Magic card rarities.

    The rarities are defined in increasing order of rarity and value.
    """

    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    MYTHIC = "Mythic"

    def __str__(self) -> str:
        """Return the string representation of the rarity."""
        return self.value

    @property
    def glow_color(self) -> str:
        """Drop-shadow color used around the set symbol."""
        return RARITY_COLORS[self]

    @classmethod
    def from_string(cls, value: str) -> "Rarity":
        """Create a Rarity from a string value, case-insensitive."""
        if not isinstance(value, str):
            raise ValueError(f"Expected string, got {type(value)}")

        normalized = value.lower().strip()
        for rarity in cls:
            if rarity.value.lower() == normalized:
                return rarity

        raise ValueError(
            f"Invalid rarity: {value}. Valid rarities are: {[r.value for r in cls]}"
        )


RARITY_COLORS = {
    Rarity.COMMON: "#000000",
    Rarity.UNCOMMON: "#C0C0C0",
    Rarity.RARE: "#FFD700",
    Rarity.MYTHIC: "#FF8000",
}
