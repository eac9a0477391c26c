"""
Pydantic schema definitions for the personalization engine.

A product's personalization schema is authored in the admin back-office
and arrives as camelCase JSON (``minLength``, ``pageIndex``,
``avatarMappings`` ...). Every model here accepts both the camelCase wire
names and the snake_case attribute names, and serialises back to
camelCase so that the storefront receives the shape it sent.

The ``Variant`` type is a discriminated union keyed on ``type``: text
inputs, option sets, colour swatches, checkboxes and option grids are
distinct classes, and code that needs to branch on the kind of a variant
goes through the helpers at the bottom of this module rather than
comparing strings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated, Literal


DEFAULT_COMBINATION_KEY = "default"
# Element-level key matching every combination.
ALL_COMBINATIONS_KEY = "all"

# tab id -> variant id -> selected value (option id or free text)
Selections = Dict[str, Dict[str, str]]
AvatarMapping = Dict[str, str]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Schema model: tabs -> variants -> options


class Option(CamelModel):
    id: str
    label: str = ""
    # Colour hex for swatches, image URL for pictures.
    resource: Optional[str] = None
    thumbnail: Optional[str] = None


class _VariantBase(CamelModel):
    id: str
    label: str = ""
    title: Optional[str] = None
    show_label: Optional[bool] = None
    thumbnail: Optional[str] = None
    resource: Optional[str] = None


class TextVariant(_VariantBase):
    type: Literal["text"] = "text"
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    # Some back-office exports keep an empty option list on text inputs.
    options: List[Option] = Field(default_factory=list)


class OptionsVariant(_VariantBase):
    type: Literal["options"] = "options"
    options: List[Option] = Field(default_factory=list)


class ColorVariant(_VariantBase):
    type: Literal["color"] = "color"
    options: List[Option] = Field(default_factory=list)


class CheckboxVariant(_VariantBase):
    type: Literal["checkbox"] = "checkbox"
    options: List[Option] = Field(default_factory=list)


class GridVariant(_VariantBase):
    """A set of options displayed as a grid of thumbnails."""

    type: Literal["grid"] = "grid"
    options: List[Option] = Field(default_factory=list)


Variant = Annotated[
    Union[TextVariant, OptionsVariant, ColorVariant, CheckboxVariant, GridVariant],
    Field(discriminator="type"),
]


class Tab(CamelModel):
    id: str
    label: str = ""
    type: Literal["character", "other"] = "character"
    variants: List[Variant] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        # The back-office historically called non-character tabs "element".
        if value == "element":
            return "other"
        return value

    @field_validator("variants", mode="before")
    @classmethod
    def _default_variant_type(cls, value: Any) -> Any:
        # Variants saved before the type field existed were all option sets.
        if not isinstance(value, list):
            return value
        return [
            {**item, "type": "options"} if isinstance(item, dict) and not item.get("type") else item
            for item in value
        ]

    def variant(self, variant_id: str) -> Optional[Variant]:
        return next((v for v in self.variants if v.id == variant_id), None)


class WizardConfig(CamelModel):
    avatar_style: Literal["watercolor", "cartoon", "realistic"] = "watercolor"
    tabs: List[Tab] = Field(default_factory=list)
    # key: "tabId:optA_optB" (scoped) or "optA_optB" (legacy) -> image URL
    avatar_mappings: AvatarMapping = Field(default_factory=dict)

    def tab(self, tab_id: str) -> Optional[Tab]:
        return next((t for t in self.tabs if t.id == tab_id), None)


# ---------------------------------------------------------------------------
# Content configuration authored per page in the admin content editor


class PageDefinition(CamelModel):
    id: str
    page_number: int
    label: str = ""
    description: Optional[str] = None


class ImageVariant(CamelModel):
    """Background art for one page and one combination key."""

    id: str
    page_index: int
    combination_key: str = DEFAULT_COMBINATION_KEY
    image_url: str


class TextPosition(CamelModel):
    page_index: int
    zone_id: str = "body"
    layer: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    rotation: Optional[float] = None


class ParsedCondition(CamelModel):
    character: str
    variant: str
    option: str


class ConditionalSegment(CamelModel):
    text: str
    condition: Optional[str] = None
    parsed_condition: Optional[ParsedCondition] = None
    variables: Optional[List[str]] = None
    applied_character_style: Optional[str] = None


class TextElement(CamelModel):
    id: str
    label: str = ""
    type: Literal["fixed", "variable"] = "fixed"
    content: str = ""
    style: Dict[str, Any] = Field(default_factory=dict)
    position: TextPosition
    conditional_segments: Optional[List[ConditionalSegment]] = None
    # Shown only for this combination; empty, "default" or "all" shows it always.
    combination_key: Optional[str] = None


class ImagePosition(CamelModel):
    page_index: int
    layer: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    rotation: Optional[float] = None


class ImageElement(CamelModel):
    """A sticker placed on a page, either fixed or bound to a tab's avatar."""

    id: str
    label: str = ""
    type: Literal["static", "variable"] = "static"
    url: Optional[str] = None
    # For ``variable`` stickers: id of the tab whose avatar is shown.
    variable_key: Optional[str] = None
    position: ImagePosition
    combination_key: Optional[str] = None


class ContentConfig(CamelModel):
    pages: List[PageDefinition] = Field(default_factory=list)
    texts: List[TextElement] = Field(default_factory=list)
    images: List[ImageVariant] = Field(default_factory=list)
    image_elements: List[ImageElement] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Products


class StoryPage(CamelModel):
    text: str
    image_prompt: str = ""
    image_url: Optional[str] = None


class BookProduct(CamelModel):
    """A personalizable book as supplied by the catalog."""

    id: str
    name: str
    description: str = ""
    price: float = 0.0
    cover_image: str = ""
    theme: Optional[str] = None
    wizard_config: Optional[WizardConfig] = None
    content_config: Optional[ContentConfig] = None
    # Flat, already generated story used by books without admin content.
    story_pages: List[StoryPage] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Buyer configuration


class BookConfig(CamelModel):
    """Resolved configuration of one personalized book.

    ``characters`` is the full selection snapshot; ``child_name`` and
    ``appearance`` are denormalized from it for the cart and order screens.
    """

    child_name: str = ""
    age: Optional[int] = None
    gender: Optional[str] = None
    theme: Optional[str] = None
    appearance: Dict[str, str] = Field(default_factory=dict)
    dedication: Optional[str] = None
    author: Optional[str] = None
    characters: Selections = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Resolved page description handed to the rendering surface


class TextPlacement(CamelModel):
    id: str
    text: str
    zone_id: str = "body"
    layer: int = 0
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    rotation: Optional[float] = None
    style: Dict[str, Any] = Field(default_factory=dict)


class StickerPlacement(CamelModel):
    id: str
    url: str
    layer: int = 0
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    rotation: Optional[float] = None


class ResolvedPage(CamelModel):
    page_index: int
    empty: bool = False
    legacy: bool = False
    background: Optional[str] = None
    combination_key: str = DEFAULT_COMBINATION_KEY
    texts: List[TextPlacement] = Field(default_factory=list)
    stickers: List[StickerPlacement] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Variant kind dispatch

_KEY_VARIANT_TYPES = (OptionsVariant, ColorVariant, GridVariant)


def contributes_to_key(variant: Variant) -> bool:
    """Whether the variant's selection takes part in combination keys."""
    if isinstance(variant, _KEY_VARIANT_TYPES):
        return True
    if isinstance(variant, (TextVariant, CheckboxVariant)):
        return False
    raise TypeError(f"Unknown variant kind: {type(variant).__name__}")


def is_text(variant: Variant) -> bool:
    return isinstance(variant, TextVariant)
