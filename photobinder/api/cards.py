"""
Edited card image endpoints.

Edited renders are stored locally only and override the card's remote image
for display and export until cleared.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from photobinder.api.dependencies import get_edited_image_cache
from photobinder.models.failure import NotFoundError
from photobinder.services.edited_images import EditedImageCache
from photobinder.services.validation import validate_image_data_url

router = APIRouter(prefix="/cards", tags=["cards"])

Cache = Annotated[EditedImageCache, Depends(get_edited_image_cache)]


class EditedImageRequest(BaseModel):
    image: str = Field(..., description="PNG or JPEG data URL")


class EditedImageResponse(BaseModel):
    card_id: str
    image: str


class EditedImageList(BaseModel):
    card_ids: list[str]


@router.get("/edited-images", response_model=EditedImageList)
async def list_edited_images(cache: Cache) -> EditedImageList:
    """Cards whose display and export use a locally edited image."""
    return EditedImageList(card_ids=await cache.card_ids())


@router.delete("/edited-images", status_code=status.HTTP_204_NO_CONTENT)
async def clear_edited_images(cache: Cache) -> None:
    await cache.clear_all()


@router.put("/{card_id}/edited-image", response_model=EditedImageResponse)
async def save_edited_image(
    card_id: str, request: EditedImageRequest, cache: Cache
) -> EditedImageResponse:
    validate_image_data_url(request.image)
    await cache.save(card_id, request.image)
    return EditedImageResponse(card_id=card_id, image=request.image)


@router.get("/{card_id}/edited-image", response_model=EditedImageResponse)
async def get_edited_image(card_id: str, cache: Cache) -> EditedImageResponse:
    image = await cache.get(card_id)
    if image is None:
        raise NotFoundError("edited image", card_id)
    return EditedImageResponse(card_id=card_id, image=image)


@router.delete("/{card_id}/edited-image", status_code=status.HTTP_204_NO_CONTENT)
async def clear_edited_image(card_id: str, cache: Cache) -> None:
    await cache.clear(card_id)
