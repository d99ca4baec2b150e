"""
PhotoBinder services.

Binder pagination, card overlays, image resolution, print export,
drag-reorder, local preferences and the backend RPC client.
"""

from photobinder.services.accent_color import AccentColor, AccentColorPreference, css_variables
from photobinder.services.admin import (
    AdminLockedError,
    AdminSessionStore,
    MasterKeyAttemptTracker,
    MasterKeyGate,
    RateLimitExceededError,
    is_superuser_email,
)
from photobinder.services.backend_client import (
    BackendClient,
    BackendError,
    find_binder,
    find_card,
)
from photobinder.services.edited_images import EditedImageCache
from photobinder.services.error_messages import (
    BinderLimitReachedError,
    normalize_backend_error,
    plan_for,
)
from photobinder.services.export import (
    BrowserPrintSurface,
    ExportOptions,
    ExportResult,
    PrintSurface,
    export_binder_page,
    generate_filename,
    open_browser_surface,
)
from photobinder.services.image_resolver import (
    ImageFetchError,
    ImageResolver,
    ResolvedCard,
    bytes_to_data_url,
    embed_overlay_assets,
)
from photobinder.services.overlays import CardOverlays, card_overlays
from photobinder.services.page_renderer import PageSize, QualityMode, render_print_page
from photobinder.services.pagination import BinderPagination, paginate, total_pages
from photobinder.services.reorder import DragReorder, ReorderOutcome, reorder_cards
from photobinder.services.storage import (
    KeyValueStore,
    MemoryKeyValueStore,
    NamespacedStore,
    SqlKeyValueStore,
)
from photobinder.services.timeouts import BackendTimeoutError, with_timeout
from photobinder.services.validation import parse_layout, validate_layout

__all__ = [
    "AccentColor",
    "AccentColorPreference",
    "AdminLockedError",
    "AdminSessionStore",
    "BackendClient",
    "BackendError",
    "BackendTimeoutError",
    "BinderLimitReachedError",
    "BinderPagination",
    "BrowserPrintSurface",
    "CardOverlays",
    "DragReorder",
    "EditedImageCache",
    "ExportOptions",
    "ExportResult",
    "ImageFetchError",
    "ImageResolver",
    "KeyValueStore",
    "MasterKeyAttemptTracker",
    "MasterKeyGate",
    "MemoryKeyValueStore",
    "NamespacedStore",
    "PageSize",
    "PrintSurface",
    "QualityMode",
    "RateLimitExceededError",
    "ReorderOutcome",
    "ResolvedCard",
    "SqlKeyValueStore",
    "bytes_to_data_url",
    "card_overlays",
    "css_variables",
    "embed_overlay_assets",
    "export_binder_page",
    "find_binder",
    "find_card",
    "generate_filename",
    "is_superuser_email",
    "normalize_backend_error",
    "open_browser_surface",
    "paginate",
    "parse_layout",
    "plan_for",
    "render_print_page",
    "reorder_cards",
    "total_pages",
    "validate_layout",
    "with_timeout",
]
