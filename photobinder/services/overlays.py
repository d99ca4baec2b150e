"""
Overlay asset resolution.

Maps card rarity and condition to the static overlay images drawn on top of a
card. Both the page view API and the print renderer use this module, so the
on-screen and exported pages always show the same decorations.

Mapping policy:
- "good" and "fair" conditions intentionally reuse the "played" sticker
- "none" and unrecognised values resolve to no overlay
- only legendary cards get the holographic glint
"""

from dataclasses import dataclass

from photobinder.models.binder import CardCondition, CardRarity, Photocard

_ASSET_ROOT = "/assets/generated"

MINT_STICKER = f"{_ASSET_ROOT}/price-tag-mint.dim_512x512.png"
NEAR_MINT_STICKER = f"{_ASSET_ROOT}/price-tag-near-mint.dim_512x512.png"
PLAYED_STICKER = f"{_ASSET_ROOT}/price-tag-played.dim_512x512.png"

COMMON_BADGE = f"{_ASSET_ROOT}/rarity-common.dim_128x128.png"
RARE_BADGE = f"{_ASSET_ROOT}/rarity-rare.dim_128x128.png"
LEGENDARY_BADGE = f"{_ASSET_ROOT}/rarity-legendary.dim_128x128.png"
EPIC_BADGE = f"{_ASSET_ROOT}/rarity-epic.dim_128x128.png"

GLINT_OVERLAY = f"{_ASSET_ROOT}/stickers-pack-01.dim_1024x1024.png"

_CONDITION_STICKERS: dict[CardCondition, str] = {
    CardCondition.MINT: MINT_STICKER,
    CardCondition.NEAR_MINT: NEAR_MINT_STICKER,
    CardCondition.PLAYED: PLAYED_STICKER,
    CardCondition.GOOD: PLAYED_STICKER,
    CardCondition.FAIR: PLAYED_STICKER,
}

_RARITY_BADGES: dict[CardRarity, str] = {
    CardRarity.COMMON: COMMON_BADGE,
    CardRarity.RARE: RARE_BADGE,
    CardRarity.LEGENDARY: LEGENDARY_BADGE,
    CardRarity.ULTRA_RARE: EPIC_BADGE,
}


def _coerce(enum_type, value):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return None


def condition_sticker(condition: CardCondition | str) -> str | None:
    """Sticker asset path for a card condition, or None."""
    return _CONDITION_STICKERS.get(_coerce(CardCondition, condition))


def rarity_badge(rarity: CardRarity | str) -> str | None:
    """Badge asset path for a card rarity, or None."""
    return _RARITY_BADGES.get(_coerce(CardRarity, rarity))


def should_show_glint(rarity: CardRarity | str) -> bool:
    return _coerce(CardRarity, rarity) is CardRarity.LEGENDARY


def glint_overlay_path() -> str:
    return GLINT_OVERLAY


def overlay_asset_paths() -> list[str]:
    """Every distinct overlay asset, in a stable order."""
    paths = [*_CONDITION_STICKERS.values(), *_RARITY_BADGES.values(), GLINT_OVERLAY]
    return list(dict.fromkeys(paths))


@dataclass(frozen=True, slots=True)
class CardOverlays:
    """All decorations for one card."""

    condition_sticker: str | None
    rarity_badge: str | None
    glint: str | None
    quantity_badge: str | None


def card_overlays(card: Photocard, asset_base_url: str = "") -> CardOverlays:
    """
    Resolve every overlay for a card.

    ``asset_base_url`` is prefixed to asset paths so pages can point at a CDN.
    """

    def _url(path: str | None) -> str | None:
        return f"{asset_base_url.rstrip('/')}{path}" if path else None

    return CardOverlays(
        condition_sticker=_url(condition_sticker(card.condition)),
        rarity_badge=_url(rarity_badge(card.rarity)),
        glint=_url(GLINT_OVERLAY) if should_show_glint(card.rarity) else None,
        quantity_badge=f"×{card.quantity}" if card.quantity > 1 else None,
    )
