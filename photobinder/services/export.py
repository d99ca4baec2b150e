"""
Binder page export.

Resolves card images, renders the printable document and hands it to a
print surface. The surface stands in for the browser print window: the
caller supplies a factory, and a factory that cannot open a surface (the
popup-blocked case) makes the export fail with ``PopupBlockedError`` so the
user can be told how to fix it.
"""

import logging
import re
import tempfile
import webbrowser
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from photobinder.models.binder import Photocard
from photobinder.models.failure import PopupBlockedError
from photobinder.services.image_resolver import ImageResolver
from photobinder.services.page_renderer import PageSize, QualityMode, render_print_page

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)
_HYPHEN_RUN = re.compile(r"-+")


def generate_filename(binder_name: str, page_number: int) -> str:
    """
    Suggested PDF filename for a binder page.

    >>> generate_filename("My K-pop Collection!", 2)
    'my-k-pop-collection-page-2.pdf'
    """
    slug = _NON_ALPHANUMERIC.sub("-", binder_name)
    slug = _HYPHEN_RUN.sub("-", slug).strip("-").lower()
    return f"{slug}-page-{page_number}.pdf"


class PrintSurface(Protocol):
    """A transient place to show a document and trigger printing."""

    def write(self, html: str) -> None: ...

    def print(self) -> None: ...

    def close(self) -> None: ...


PrintSurfaceFactory = Callable[[], PrintSurface | None]


class BrowserPrintSurface:
    """Writes the document to an HTML file and opens it in the system browser."""

    def __init__(
        self,
        path: Path,
        browser: webbrowser.BaseBrowser | None = None,
        delete_on_close: bool = False,
    ) -> None:
        self.path = path
        self._browser = browser
        self._delete_on_close = delete_on_close

    def write(self, html: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(html, encoding="utf-8")

    def print(self) -> None:
        uri = self.path.resolve().as_uri()
        opened = self._browser.open(uri) if self._browser else webbrowser.open(uri)
        if not opened:
            raise PopupBlockedError(detail=f"browser refused to open {uri}")
        logger.info("Opened %s for printing", uri)

    def close(self) -> None:
        if self._delete_on_close:
            self.path.unlink(missing_ok=True)


def open_browser_surface(output_path: Path | None = None) -> BrowserPrintSurface | None:
    """
    Open a browser-backed print surface.

    Returns None when no browser is available.
    """
    try:
        browser = webbrowser.get()
    except webbrowser.Error as e:
        logger.warning("No browser available for printing: %s", e)
        return None

    if output_path is not None:
        return BrowserPrintSurface(output_path, browser=browser)

    handle = tempfile.NamedTemporaryFile(prefix="photobinder-", suffix=".html", delete=False)
    handle.close()
    return BrowserPrintSurface(Path(handle.name), browser=browser)


@dataclass
class ExportOptions:
    """What to export and how it should look."""

    binder_name: str
    page_number: int
    cards: Sequence[Photocard]
    page_background: str
    page_size: PageSize = PageSize.A4
    quality: QualityMode = QualityMode.STANDARD


@dataclass(frozen=True, slots=True)
class ExportResult:
    filename: str
    html: str


async def render_export_document(
    options: ExportOptions,
    resolver: ImageResolver,
    overlay_sources: Mapping[str, str] | None = None,
    asset_base_url: str = "",
) -> ExportResult:
    """
    Resolve images and render the printable document without printing it.

    Raises:
        ImageFetchError: If any card image cannot be fetched
    """
    resolved = await resolver.resolve_many(options.cards)
    html = render_print_page(
        binder_name=options.binder_name,
        page_number=options.page_number,
        cards=resolved,
        page_background=options.page_background,
        page_size=options.page_size,
        quality=options.quality,
        overlay_sources=overlay_sources,
        asset_base_url=asset_base_url,
    )
    return ExportResult(
        filename=generate_filename(options.binder_name, options.page_number),
        html=html,
    )


async def export_binder_page(
    options: ExportOptions,
    resolver: ImageResolver,
    surface_factory: PrintSurfaceFactory,
    overlay_sources: Mapping[str, str] | None = None,
    asset_base_url: str = "",
) -> ExportResult:
    """
    Export one binder page through a print surface.

    The surface is always closed once printing has been triggered.

    Raises:
        ImageFetchError: If any card image cannot be fetched
        PopupBlockedError: If the print surface cannot be opened
    """
    result = await render_export_document(options, resolver, overlay_sources, asset_base_url)

    surface = surface_factory()
    if surface is None:
        raise PopupBlockedError()

    try:
        surface.write(result.html)
        surface.print()
    finally:
        surface.close()

    logger.info(
        "Exported page %d of %r as %s",
        options.page_number,
        options.binder_name,
        result.filename,
    )
    return result
