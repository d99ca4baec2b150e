from photobinder.models.account import (
    AdminContentSettings,
    StripeKeys,
    SubscriptionStatus,
    UserAnalytics,
    UserProfile,
)
from photobinder.models.binder import (
    Binder,
    BinderTheme,
    CardCondition,
    CardPosition,
    CardRarity,
    Photocard,
    WireModel,
    default_theme,
)
from photobinder.models.failure import (
    ApiResponse,
    ErrorCategory,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OutcomeType,
    PopupBlockedError,
    ValidationFailedError,
    category_for,
    create_unknown_failure,
    finalize_response,
)
from photobinder.models.layout import LAYOUT_PATTERN, GridLayout

__all__ = [
    "LAYOUT_PATTERN",
    "AdminContentSettings",
    "ApiResponse",
    "Binder",
    "BinderTheme",
    "CardCondition",
    "CardPosition",
    "CardRarity",
    "ErrorCategory",
    "FailureDetail",
    "FailureKind",
    "GridLayout",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "Photocard",
    "PopupBlockedError",
    "StripeKeys",
    "SubscriptionStatus",
    "UserAnalytics",
    "UserProfile",
    "ValidationFailedError",
    "WireModel",
    "category_for",
    "create_unknown_failure",
    "default_theme",
    "finalize_response",
]
