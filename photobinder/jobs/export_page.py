"""
Export one binder page to a printable HTML file.

Fetches the binder from the backend, inlines its card images (edited images
from the local store take precedence) and writes the print document. With
``--open`` the document is opened in the system browser, ready to save as PDF.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from photobinder.config import PRINT_SLOTS_PER_PAGE, settings
from photobinder.db.database import async_session_factory, init_db
from photobinder.models.failure import KnownError
from photobinder.services.backend_client import BackendClient, find_binder
from photobinder.services.edited_images import EditedImageCache
from photobinder.services.export import (
    ExportOptions,
    ExportResult,
    export_binder_page,
    open_browser_surface,
    render_export_document,
)
from photobinder.services.image_resolver import ImageResolver, embed_overlay_assets
from photobinder.services.page_renderer import PageSize, QualityMode
from photobinder.services.pagination import BinderPagination
from photobinder.services.storage import SqlKeyValueStore
from photobinder.services.validation import parse_layout

logger = logging.getLogger(__name__)


async def run_export(
    binder_id: str,
    page_number: int = 1,
    layout: str = settings.default_layout,
    page_size: PageSize = PageSize.A4,
    quality: QualityMode = QualityMode.STANDARD,
    output: Path | None = None,
    open_browser: bool = False,
) -> ExportResult:
    """
    Export a page of a binder.

    Args:
        binder_id: Binder to export
        page_number: 1-based page, clamped to the binder's pages
        layout: Grid layout token used to split the binder into pages
        page_size: Paper size
        quality: Image quality hint
        output: Where to write the document (default: suggested filename as .html)
        open_browser: Open the written document for printing

    Raises:
        KnownError: On backend, image or print surface failures
    """
    grid = parse_layout(layout)
    if grid.cards_per_page > PRINT_SLOTS_PER_PAGE:
        raise ValueError(f"layout {grid.token} does not fit a printed page")

    await init_db()
    cache = EditedImageCache(SqlKeyValueStore(async_session_factory))
    resolver = ImageResolver(cache, timeout_seconds=settings.request_timeout_seconds)
    overlay_sources = embed_overlay_assets(Path(settings.asset_dir)) if settings.asset_dir else {}

    async with BackendClient(settings.backend_url, settings.request_timeout_seconds) as backend:
        binder = find_binder(await backend.get_binders(), binder_id)

    pagination = BinderPagination(binder.cards, grid.cards_per_page, page_number - 1)
    options = ExportOptions(
        binder_name=binder.name,
        page_number=pagination.current_page + 1,
        cards=pagination.current_cards,
        page_background=binder.theme.page_background,
        page_size=page_size,
        quality=quality,
    )

    if open_browser:
        return await export_binder_page(
            options,
            resolver,
            surface_factory=lambda: open_browser_surface(output),
            overlay_sources=overlay_sources,
            asset_base_url=settings.asset_base_url,
        )

    result = await render_export_document(
        options, resolver, overlay_sources, settings.asset_base_url
    )
    path = output or Path(result.filename).with_suffix(".html")
    path.write_text(result.html, encoding="utf-8")
    logger.info("Wrote %s (save as %s)", path, result.filename)
    return result


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Export a binder page for printing")
    parser.add_argument("binder_id")
    parser.add_argument("--page", type=int, default=1, help="1-based page number")
    parser.add_argument("--layout", default=settings.default_layout)
    parser.add_argument("--page-size", choices=[s.value for s in PageSize], default="a4")
    parser.add_argument("--quality", choices=[q.value for q in QualityMode], default="standard")
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument("--open", action="store_true", help="Open in the browser to print")
    args = parser.parse_args()

    try:
        asyncio.run(
            run_export(
                args.binder_id,
                page_number=args.page,
                layout=args.layout,
                page_size=PageSize(args.page_size),
                quality=QualityMode(args.quality),
                output=args.output,
                open_browser=args.open,
            )
        )
    except KnownError as e:
        logger.error("%s %s", e.message, e.suggestion or "")
        sys.exit(1)
    except ValueError as e:
        parser.error(str(e))


if __name__ == "__main__":
    main()
