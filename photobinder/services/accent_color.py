"""Accent color preference stored under a fixed local key."""

import logging
from dataclasses import dataclass
from enum import Enum

from photobinder.services.storage import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "binder-accent-color"


class AccentColor(str, Enum):
    DEFAULT = "default"
    CORAL = "coral"
    SAGE = "sage"
    LAVENDER = "lavender"
    ROSE = "rose"
    TEAL = "teal"


@dataclass(frozen=True, slots=True)
class AccentPalette:
    """OKLCH lightness/chroma/hue triples for the accent and its hover state."""

    accent: str
    accent_hover: str


# DEFAULT has no palette: the stylesheet defaults apply
ACCENT_COLORS: dict[AccentColor, AccentPalette | None] = {
    AccentColor.DEFAULT: None,
    AccentColor.CORAL: AccentPalette("0.65 0.15 25", "0.58 0.14 25"),
    AccentColor.SAGE: AccentPalette("0.75 0.08 140", "0.68 0.10 140"),
    AccentColor.LAVENDER: AccentPalette("0.70 0.12 280", "0.63 0.14 280"),
    AccentColor.ROSE: AccentPalette("0.68 0.14 350", "0.61 0.16 350"),
    AccentColor.TEAL: AccentPalette("0.72 0.10 190", "0.65 0.12 190"),
}


def css_variables(color: AccentColor) -> dict[str, str]:
    """CSS custom property overrides for a color; empty for the default."""
    palette = ACCENT_COLORS[color]
    if palette is None:
        return {}
    return {
        "--binder-accent": palette.accent,
        "--binder-accent-hover": palette.accent_hover,
    }


class AccentColorPreference:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def get(self) -> AccentColor:
        stored = await self._store.get(STORAGE_KEY)
        if stored is None:
            return AccentColor.DEFAULT
        try:
            return AccentColor(stored)
        except ValueError:
            logger.warning("Ignoring unknown stored accent color %r", stored)
            return AccentColor.DEFAULT

    async def set(self, color: AccentColor) -> None:
        await self._store.set(STORAGE_KEY, color.value)
