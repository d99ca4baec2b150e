"""
Input validation.

Everything here runs before a request reaches the backend. Failures raise
``ValidationFailedError`` so they surface inline next to the offending input.
"""

import base64
from collections.abc import Iterable

from photobinder.config import ALLOWED_IMAGE_TYPES, MAX_IMAGE_SIZE_BYTES
from photobinder.models.failure import ValidationFailedError
from photobinder.models.layout import LAYOUT_PATTERN, GridLayout


def is_valid_layout(token: str) -> bool:
    return bool(LAYOUT_PATTERN.match(token))


def validate_layout(token: str) -> str:
    """
    Check a "<columns>x<rows>" token.

    Returns the trimmed token.

    Raises:
        ValidationFailedError: If empty or not of the form "3x3"
    """
    trimmed = token.strip()
    if not trimmed:
        raise ValidationFailedError("Please enter a preset value")
    if not is_valid_layout(trimmed):
        raise ValidationFailedError(
            'Invalid format. Use format like "3x3" or "4x3"',
            detail=f"layout: {trimmed!r}",
        )
    return trimmed


def parse_layout(token: str) -> GridLayout:
    """
    Parse a layout token into a grid.

    Raises:
        ValidationFailedError: If malformed or describing an empty grid
    """
    columns, rows = (int(part) for part in validate_layout(token).split("x"))
    if columns < 1 or rows < 1:
        raise ValidationFailedError(
            "Layouts need at least one row and one column",
            detail=f"layout: {token!r}",
        )
    return GridLayout(columns=columns, rows=rows)


def validate_new_preset(token: str, existing: Iterable[str]) -> str:
    """
    Validate a layout preset about to be added.

    Raises:
        ValidationFailedError: If malformed or already present
    """
    trimmed = validate_layout(token)
    if trimmed in set(existing):
        raise ValidationFailedError(f'Preset "{trimmed}" already exists')
    return trimmed


def validate_image_file(content_type: str | None, size: int) -> None:
    """
    Check an uploaded card image.

    Raises:
        ValidationFailedError: If not PNG/JPEG or larger than 10MB
    """
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        raise ValidationFailedError("Please upload a PNG or JPEG image file.")
    if size > MAX_IMAGE_SIZE_BYTES:
        raise ValidationFailedError(
            "Image file is too large. Please upload an image smaller than 10MB."
        )


def validate_stripe_keys(publishable_key: str, secret_key: str) -> None:
    """
    Raises:
        ValidationFailedError: If either key has the wrong prefix
    """
    if not publishable_key.startswith("pk_"):
        raise ValidationFailedError('Publishable key must start with "pk_"')
    if not secret_key.startswith("sk_"):
        raise ValidationFailedError('Secret key must start with "sk_"')


def normalize_email(email: str) -> str:
    return email.strip().lower()


def emails_match(first: str, second: str) -> bool:
    return normalize_email(first) == normalize_email(second)


def validate_image_data_url(data_url: str) -> str:
    """
    Check an inline image such as an edited card render.

    Returns the image's mime type.

    Raises:
        ValidationFailedError: If not a base64 PNG/JPEG data URL within the size limit
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValidationFailedError("Image must be a base64 data URL.")

    mime_type = header[len("data:") : -len(";base64")]
    try:
        size = len(base64.b64decode(payload, validate=True))
    except ValueError as e:
        raise ValidationFailedError("Image data is not valid base64.") from e

    validate_image_file(mime_type, size)
    return mime_type
