"""
Binder, photocard and theme models.

These mirror the records returned by the remote backend. The backend speaks
camelCase JSON, so every model accepts and emits camelCase aliases while
exposing snake_case attributes.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the backend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class CardRarity(str, Enum):
    NONE = "none"
    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"
    ULTRA_RARE = "ultraRare"


class CardCondition(str, Enum):
    NONE = "none"
    PLAYED = "played"
    FAIR = "fair"
    GOOD = "good"
    MINT = "mint"
    NEAR_MINT = "nearMint"


class CardPosition(WireModel):
    """
    Page and slot a card was placed in.

    Advisory only: display order always comes from the card's index in the
    binder's card sequence.
    """

    page: int = Field(default=0, ge=0)
    slot: int = Field(default=0, ge=0)


class Photocard(WireModel):
    """A single card in a binder."""

    id: str
    name: str
    created: int = 0
    quantity: int = Field(default=1, ge=1)
    rarity: CardRarity = CardRarity.NONE
    condition: CardCondition = CardCondition.NONE
    position: CardPosition = Field(default_factory=CardPosition)
    image: str = Field(..., description="Direct URL of the external image blob")


class BinderTheme(WireModel):
    """Presentation attributes for a binder. No invariants beyond defaults."""

    cover_color: str = "#F4E8D8"
    cover_texture: str | None = "/assets/generated/binder-cover-beige-texture.dim_2048x2048.png"
    page_background: str = "#FFF8F0"
    background_pattern: str | None = (
        "/assets/generated/binder-page-light-texture.dim_2048x2048.png"
    )
    border_style: str = "solid"
    accent_color: str = "#C89B7B"
    text_color: str = "#4A4A4A"
    card_frame_style: str = "solid"


def default_theme() -> BinderTheme:
    """Theme applied to newly created binders."""
    return BinderTheme()


class Binder(WireModel):
    """A named, ordered collection of photocards owned by one user."""

    id: str
    name: str
    created: int = 0
    cards: list[Photocard] = Field(default_factory=list)
    theme: BinderTheme = Field(default_factory=default_theme)
