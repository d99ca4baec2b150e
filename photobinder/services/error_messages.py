"""Turn backend errors into messages a collector can act on."""

from dataclasses import dataclass

from photobinder.config import settings
from photobinder.models.account import SubscriptionStatus
from photobinder.models.failure import FailureKind, KnownError

_BINDER_LIMIT_MARKERS = (
    "binder limit reached",
    "binder limit",
    "upgrade your subscription to add more binders",
)


@dataclass(frozen=True, slots=True)
class PlanInfo:
    name: str
    max_binders: int
    is_free: bool


def plan_for(status: SubscriptionStatus) -> PlanInfo:
    if status is SubscriptionStatus.PRO:
        return PlanInfo("Subscriber", settings.subscriber_binder_limit, is_free=False)
    return PlanInfo("Free", settings.free_binder_limit, is_free=True)


@dataclass(frozen=True, slots=True)
class NormalizedError:
    user_message: str
    debug_message: str
    binder_limit: bool = False


def is_binder_limit_error(error: BaseException | str | None) -> bool:
    if not error:
        return False
    text = str(error).lower()
    return any(marker in text for marker in _BINDER_LIMIT_MARKERS)


def normalize_backend_error(error: BaseException | str, plan: PlanInfo) -> NormalizedError:
    """Map a failed binder creation to user-facing and debug messages."""
    debug_message = str(error)

    if is_binder_limit_error(error):
        if plan.is_free:
            hint = (
                f" Upgrade to Subscriber to get up to {settings.subscriber_binder_limit} "
                "binders, or delete an existing binder to create a new one."
            )
        else:
            hint = " Delete an existing binder to create a new one."
        return NormalizedError(
            user_message=(
                f"You've reached the limit of {plan.max_binders} binders "
                f"on the {plan.name} plan.{hint}"
            ),
            debug_message=debug_message,
            binder_limit=True,
        )

    return NormalizedError(
        user_message="Failed to create binder. Please try again.",
        debug_message=debug_message,
    )


def upgrade_url() -> str | None:
    """Configured subscription upgrade link, if any."""
    url = settings.upgrade_url.strip()
    return url or None


class BinderLimitReachedError(KnownError):
    """The backend refused a new binder because the plan is full."""

    def __init__(self, normalized: NormalizedError):
        super().__init__(
            kind=FailureKind.BINDER_LIMIT_REACHED,
            message=normalized.user_message,
            detail=normalized.debug_message,
            suggestion=upgrade_url(),
            status_code=403,
        )


def raise_for_binder_creation(error: KnownError, plan: PlanInfo) -> None:
    """
    Re-raise a failed binder creation with a plan-aware message.

    Raises:
        BinderLimitReachedError: If the backend reported the binder limit
        KnownError: The original error otherwise
    """
    normalized = normalize_backend_error(error, plan)
    if normalized.binder_limit:
        raise BinderLimitReachedError(normalized) from error
    raise error
