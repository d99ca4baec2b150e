"""
Printable binder page rendering.

Produces a standalone HTML document for one binder page: a fixed 3-column
grid of up to 12 slots, each filled card carrying its image and overlays,
remaining slots drawn as dashed placeholders. The browser's print dialog
turns the document into a PDF.

All images should be inline ``data:`` URLs (see ``image_resolver``); the
document is opened in a context without the user's session.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from photobinder.config import PRINT_COLUMNS, PRINT_SLOTS_PER_PAGE
from photobinder.models.binder import default_theme
from photobinder.services.image_resolver import ResolvedCard
from photobinder.services.overlays import card_overlays

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

_environment = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "j2"]),
)

# Colors end up inside a <style> block, where HTML escaping does not help
_SAFE_CSS_COLOR = re.compile(r"^[#a-zA-Z0-9(),.%\s-]{1,64}$")


class PageSize(str, Enum):
    A4 = "a4"
    LETTER = "letter"


class QualityMode(str, Enum):
    STANDARD = "standard"
    HIGH = "high"


PAGE_DIMENSIONS: dict[PageSize, dict[str, str]] = {
    PageSize.A4: {"width": "210mm", "height": "297mm"},
    PageSize.LETTER: {"width": "8.5in", "height": "11in"},
}

# image-rendering, image-resolution, device pixel ratio (None: no hint)
_QUALITY_HINTS: dict[QualityMode, tuple[str, str, int | None]] = {
    QualityMode.STANDARD: ("auto", "150dpi", None),
    QualityMode.HIGH: ("high-quality", "300dpi", 2),
}


@dataclass(frozen=True, slots=True)
class PrintSlot:
    """Template-ready view of one filled slot."""

    name: str
    image_src: str
    glint: str | None
    condition_sticker: str | None
    rarity_badge: str | None
    quantity_badge: str | None


def _safe_background(color: str) -> str:
    if _SAFE_CSS_COLOR.match(color):
        return color
    return default_theme().page_background


def build_slots(
    cards: Sequence[ResolvedCard],
    overlay_sources: Mapping[str, str] | None = None,
    asset_base_url: str = "",
) -> list[PrintSlot]:
    """
    Attach overlay sources to resolved cards.

    Overlay paths found in ``overlay_sources`` (typically embedded data URLs)
    are used as-is; others are prefixed with ``asset_base_url``.
    """
    sources = overlay_sources or {}

    def _src(path: str | None) -> str | None:
        if path is None:
            return None
        return sources.get(path) or f"{asset_base_url.rstrip('/')}{path}"

    slots = []
    for resolved in cards:
        overlays = card_overlays(resolved.card)
        slots.append(
            PrintSlot(
                name=resolved.card.name,
                image_src=resolved.image_data_url,
                glint=_src(overlays.glint),
                condition_sticker=_src(overlays.condition_sticker),
                rarity_badge=_src(overlays.rarity_badge),
                quantity_badge=overlays.quantity_badge,
            )
        )
    return slots


def render_print_page(
    binder_name: str,
    page_number: int,
    cards: Sequence[ResolvedCard],
    page_background: str,
    page_size: PageSize = PageSize.A4,
    quality: QualityMode = QualityMode.STANDARD,
    overlay_sources: Mapping[str, str] | None = None,
    asset_base_url: str = "",
) -> str:
    """
    Render one printable binder page.

    Raises:
        ValueError: If more cards are given than a printed page holds
    """
    if len(cards) > PRINT_SLOTS_PER_PAGE:
        raise ValueError(
            f"A printed page holds {PRINT_SLOTS_PER_PAGE} cards, got {len(cards)}"
        )

    image_rendering, image_resolution, pixel_ratio = _QUALITY_HINTS[QualityMode(quality)]
    template = _environment.get_template("print_page.html.j2")
    return template.render(
        binder_name=binder_name,
        page_number=page_number,
        dimensions=PAGE_DIMENSIONS[PageSize(page_size)],
        page_background=_safe_background(page_background),
        columns=PRINT_COLUMNS,
        image_rendering=image_rendering,
        image_resolution=image_resolution,
        pixel_ratio=pixel_ratio,
        slots=build_slots(cards, overlay_sources, asset_base_url),
        empty_slots=PRINT_SLOTS_PER_PAGE - len(cards),
    )
