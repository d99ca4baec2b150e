from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PHOTOBINDER_")

    app_name: str = "PhotoBinder"
    debug: bool = False
    log_level: str = "INFO"

    # Local key-value store (accent color, edited-image cache)
    database_url: str = "sqlite+aiosqlite:///./photobinder.db"

    # Remote backend RPC endpoint
    backend_url: str = "http://localhost:4943"
    request_timeout_seconds: float = 30.0

    # Overlay assets: URL prefix used in rendered pages, and the local directory
    # holding the files when they need to be embedded into print documents
    asset_base_url: str = ""
    asset_dir: str | None = None

    default_layout: str = "3x3"

    # Admin portal
    master_admin_key: str = ""
    master_key_max_attempts: int = 5
    master_key_window_seconds: int = 900
    admin_inactivity_timeout_seconds: int = 1800
    superuser_emails: list[str] = []

    # Subscription plans
    upgrade_url: str = ""
    free_binder_limit: int = 1
    subscriber_binder_limit: int = 5


settings = Settings()


# =============================================================================
# PRINT LAYOUT LIMITS
# =============================================================================

# Printed pages always use a 3-column grid of 12 slots, independent of the
# on-screen grid layout
PRINT_COLUMNS = 3
PRINT_SLOTS_PER_PAGE = 12

# =============================================================================
# IMAGE UPLOAD LIMITS
# =============================================================================

MAX_IMAGE_SIZE_BYTES = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/jpg"})
