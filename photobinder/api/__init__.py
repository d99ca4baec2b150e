from photobinder.api.admin import router as admin_router
from photobinder.api.binders import router as binders_router
from photobinder.api.cards import router as cards_router
from photobinder.api.export import router as export_router
from photobinder.api.health import router as health_router
from photobinder.api.preferences import router as preferences_router

__all__ = [
    "admin_router",
    "binders_router",
    "cards_router",
    "export_router",
    "health_router",
    "preferences_router",
]
