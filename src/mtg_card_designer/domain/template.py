"""Template model: the reusable visual schema a card is laid out on."""

import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Built-in element names, in the order text/symbol nodes are stacked.
BUILTIN_ELEMENTS = (
    "title",
    "manaCost",
    "art",
    "typeLine",
    "setSymbol",
    "textBox",
    "ptBox",
    "collectorNumber",
    "artist",
)

REQUIRED_FONT_ROLES = (
    "title",
    "typeLine",
    "rulesText",
    "flavorText",
    "pt",
    "artist",
    "collectorNumber",
)

# textBox renders rulesText with flavorText stacked beneath it.
ELEMENT_FONT_ROLES = {
    "title": "title",
    "typeLine": "typeLine",
    "textBox": "rulesText",
    "ptBox": "pt",
    "artist": "artist",
    "collectorNumber": "collectorNumber",
}

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


def decode_json_string(value: Any) -> Any:
    """Server rows may carry nested JSON as a string column."""
    if isinstance(value, str):
        return json.loads(value)
    return value


class ElementBox(BaseModel):
    """Position of one element, in percent of the card's width and height."""

    model_config = _MODEL_CONFIG

    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    visible: Optional[bool] = None

    @property
    def is_visible(self) -> bool:
        """Only an explicit ``False`` hides an element."""
        return self.visible is not False


class FontSpec(BaseModel):
    """Font definition for one text role. Sizes are px on a 375-wide card."""

    model_config = _MODEL_CONFIG

    font_family: str
    font_size: float = Field(gt=0)
    color: str = "#000000"
    text_align: Literal["left", "center", "right"] = "left"
    font_style: Optional[Literal["normal", "italic"]] = None
    font_weight: Optional[Literal["normal", "bold"]] = None

    @property
    def italic(self) -> bool:
        return self.font_style == "italic"

    @property
    def bold(self) -> bool:
        return self.font_weight == "bold"


class CustomElement(BaseModel):
    """A template-declared element bound to one ``customFields`` entry."""

    model_config = _MODEL_CONFIG

    key: str = Field(min_length=1)
    data_field: str = Field(min_length=1)
    font_role: str = Field(min_length=1)
    box: ElementBox


class TemplateElements(BaseModel):
    """Boxes for every built-in element; none of them may be missing."""

    model_config = _MODEL_CONFIG

    title: ElementBox
    mana_cost: ElementBox
    art: ElementBox
    type_line: ElementBox
    set_symbol: ElementBox
    text_box: ElementBox
    pt_box: ElementBox
    collector_number: ElementBox
    artist: ElementBox

    def get(self, name: str) -> ElementBox:
        """Look up a box by its element name (``manaCost``, ``textBox``...)."""
        if name not in BUILTIN_ELEMENTS:
            raise KeyError(f"Unknown element: {name}")
        return getattr(self, _FIELD_BY_ELEMENT[name])

    def replace(self, name: str, box: ElementBox) -> "TemplateElements":
        if name not in BUILTIN_ELEMENTS:
            raise KeyError(f"Unknown element: {name}")
        return self.model_copy(update={_FIELD_BY_ELEMENT[name]: box})


_FIELD_BY_ELEMENT = {
    to_camel(field_name): field_name for field_name in TemplateElements.model_fields
}


class Template(BaseModel):
    """A card template: frame, element boxes, fonts and color grading."""

    model_config = _MODEL_CONFIG

    id: str
    name: str = ""
    owner_id: Optional[int] = Field(default=None, alias="user_id")
    author_name: Optional[str] = Field(default=None, alias="authorUsername")
    frame_image: str = Field(default="", alias="frameImageUrl")
    background_color: str = "#000000"
    elements: TemplateElements
    custom_elements: tuple[CustomElement, ...] = ()
    fonts: dict[str, FontSpec]

    saturation: float = Field(default=1.0, ge=0.0, le=2.0)
    hue: float = Field(default=0.0, ge=0.0, le=360.0)
    gradient_start_color: Optional[str] = None
    gradient_end_color: Optional[str] = None
    gradient_angle: float = 180.0
    gradient_opacity: float = Field(default=0.5, ge=0.0, le=1.0)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("elements", "fonts", "custom_elements", mode="before")
    @classmethod
    def decode_nested_json(cls, value: Any) -> Any:
        return decode_json_string(value)

    @field_validator("fonts")
    @classmethod
    def validate_font_roles(cls, fonts: dict[str, FontSpec]) -> dict[str, FontSpec]:
        missing = [role for role in REQUIRED_FONT_ROLES if role not in fonts]
        if missing:
            raise ValueError(f"Template is missing font roles: {', '.join(missing)}")
        return fonts

    @model_validator(mode="after")
    def validate_custom_elements(self) -> "Template":
        seen: set[str] = set()
        for element in self.custom_elements:
            if element.key in seen or element.key in BUILTIN_ELEMENTS:
                raise ValueError(f"Duplicate element key: {element.key}")
            seen.add(element.key)
            if element.font_role not in self.fonts:
                raise ValueError(
                    f"Custom element '{element.key}' uses unknown font role "
                    f"'{element.font_role}'"
                )
        return self

    @property
    def has_gradient(self) -> bool:
        """A masked gradient needs a frame and both colors."""
        return bool(
            self.frame_image and self.gradient_start_color and self.gradient_end_color
        )

    @property
    def is_new(self) -> bool:
        """Templates created in the editor but not yet persisted."""
        return self.id.startswith("new-")

    def is_owned_by(self, user_id: Optional[int]) -> bool:
        if self.is_new:
            return True
        return user_id is not None and self.owner_id == user_id

    def element_names(self) -> list[str]:
        return list(BUILTIN_ELEMENTS) + [e.key for e in self.custom_elements]

    def box_for(self, name: str) -> ElementBox:
        """Return the box of a built-in or custom element."""
        if name in BUILTIN_ELEMENTS:
            return self.elements.get(name)
        for element in self.custom_elements:
            if element.key == name:
                return element.box
        raise KeyError(f"Unknown element: {name}")

    def with_element(self, name: str, box: ElementBox) -> "Template":
        """Return a copy with one element's box replaced."""
        if name in BUILTIN_ELEMENTS:
            return self.model_copy(update={"elements": self.elements.replace(name, box)})

        custom = []
        found = False
        for element in self.custom_elements:
            if element.key == name:
                element = element.model_copy(update={"box": box})
                found = True
            custom.append(element)
        if not found:
            raise KeyError(f"Unknown element: {name}")
        return self.model_copy(update={"custom_elements": tuple(custom)})

    def with_font(self, role: str, **changes: Any) -> "Template":
        """Return a copy with one font role updated field by field."""
        fonts = dict(self.fonts)
        if role in fonts:
            fonts[role] = fonts[role].model_copy(update=changes)
        else:
            fonts[role] = FontSpec(**changes)
        return self.model_copy(update={"fonts": fonts})

    def with_custom_element(self, element: CustomElement) -> "Template":
        return Template.model_validate(
            {
                **self.model_dump(by_alias=True),
                "customElements": [
                    *(e.model_dump(by_alias=True) for e in self.custom_elements),
                    element.model_dump(by_alias=True),
                ],
            }
        )

    def copy_as_new(self, new_id: str, owner_id: Optional[int] = None) -> "Template":
        """Duplicate this template for editing under a fresh id."""
        return self.model_copy(
            update={
                "id": new_id,
                "name": f"{self.name} Copy",
                "owner_id": owner_id,
                "author_name": None,
            }
        )

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_json_dict(cls, data: dict[str, Any]) -> "Template":
        return cls.model_validate(data)
