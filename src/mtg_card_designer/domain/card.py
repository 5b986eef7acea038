"""Card content, saved cards and decks."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from mtg_card_designer.domain.enums import CardType, Rarity
from mtg_card_designer.domain.template import Template, decode_json_string

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class CardArt(BaseModel):
    """Art references: the untouched source and the cropped image drawn."""

    model_config = _MODEL_CONFIG

    original: str = ""
    cropped: str = ""


class CardData(BaseModel):
    """The content a user fills into a template."""

    model_config = _MODEL_CONFIG

    name: str = ""
    mana_cost: str = ""
    art: CardArt = Field(default_factory=CardArt)
    card_type: CardType = CardType.CREATURE
    subtype: str = ""
    rules_text: str = ""
    flavor_text: str = ""
    power: str = ""
    toughness: str = ""
    loyalty: Optional[str] = None
    rarity: Rarity = Rarity.COMMON
    artist: str = ""
    collector_number: str = ""
    set_symbol_url: str = ""
    template_id: str = ""
    custom_fields: dict[str, str] = Field(default_factory=dict)

    @field_validator("power", "toughness", "template_id", mode="before")
    @classmethod
    def coerce_to_string(cls, value: Any) -> str:
        """Stats and ids may arrive as numbers from older saves."""
        if value is None:
            return ""
        return str(value)

    @field_validator("rarity", mode="before")
    @classmethod
    def parse_rarity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Rarity.from_string(value)
        return value

    @property
    def is_creature(self) -> bool:
        return self.card_type == CardType.CREATURE

    @property
    def type_line(self) -> str:
        """Type line text, e.g. ``Creature — Human Artificer``."""
        if self.subtype:
            return f"{self.card_type.value} — {self.subtype}"
        return self.card_type.value

    def updated(self, **changes: Any) -> "CardData":
        """Return a copy with the given fields replaced and re-validated."""
        data = self.model_dump()
        data.update(changes)
        return CardData.model_validate(data)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_json_dict(cls, data: dict[str, Any]) -> "CardData":
        return cls.model_validate(data)


class SavedCard(BaseModel):
    """A card snapshot bound to the exact template it was saved with."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    deck_id: Optional[int] = None
    card_data: CardData
    template_data: Template

    @field_validator("card_data", "template_data", mode="before")
    @classmethod
    def decode_json_columns(cls, value: Any) -> Any:
        return decode_json_string(value)


class Deck(BaseModel):
    """An ordered collection of saved cards belonging to a user."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    description: str = ""
    is_public: bool = False
    cards: tuple[SavedCard, ...] = ()

    def __len__(self) -> int:
        return len(self.cards)


class AssetRef(BaseModel):
    """A library image uploaded by the user."""

    model_config = ConfigDict(frozen=True)

    id: int
    url: str


class CustomSetSymbol(BaseModel):
    """A user-provided set symbol image."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    url: str
