"""
Print export endpoint.

Returns a self-contained HTML document for one binder page. Opening it and
printing to PDF produces the exported page.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from photobinder.api.binders import Backend, load_binder
from photobinder.api.dependencies import get_image_resolver, get_overlay_sources
from photobinder.config import PRINT_SLOTS_PER_PAGE, settings
from photobinder.models.failure import ValidationFailedError
from photobinder.services.export import ExportOptions, render_export_document
from photobinder.services.image_resolver import ImageResolver
from photobinder.services.page_renderer import PageSize, QualityMode
from photobinder.services.pagination import BinderPagination
from photobinder.services.validation import parse_layout

router = APIRouter(prefix="/binders", tags=["export"])


@router.get("/{binder_id}/pages/{page_number}/print", response_class=HTMLResponse)
async def print_page(
    binder_id: str,
    page_number: int,
    backend: Backend,
    resolver: Annotated[ImageResolver, Depends(get_image_resolver)],
    overlay_sources: Annotated[dict[str, str], Depends(get_overlay_sources)],
    layout: Annotated[str, Query()] = settings.default_layout,
    page_size: Annotated[PageSize, Query()] = PageSize.A4,
    quality: Annotated[QualityMode, Query()] = QualityMode.STANDARD,
) -> HTMLResponse:
    """
    Render a binder page for printing.

    Card images are inlined, with locally edited images taking precedence.
    """
    grid = parse_layout(layout)
    if grid.cards_per_page > PRINT_SLOTS_PER_PAGE:
        raise ValidationFailedError(
            f"A printed page holds {PRINT_SLOTS_PER_PAGE} cards. "
            "Pick a smaller layout to export.",
            detail=f"layout: {grid.token}",
        )

    binder = await load_binder(backend, binder_id)
    pagination = BinderPagination(binder.cards, grid.cards_per_page, page_number - 1)
    options = ExportOptions(
        binder_name=binder.name,
        page_number=pagination.current_page + 1,
        cards=pagination.current_cards,
        page_background=binder.theme.page_background,
        page_size=page_size,
        quality=quality,
    )

    result = await render_export_document(
        options,
        resolver,
        overlay_sources=overlay_sources,
        asset_base_url=settings.asset_base_url,
    )
    return HTMLResponse(
        content=result.html,
        headers={"Content-Disposition": f'inline; filename="{result.filename}"'},
    )
