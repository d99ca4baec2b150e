"""
Remote backend RPC client.

The backend is opaque: every operation is a ``POST {base_url}/rpc/<method>``
with a JSON object of named arguments, answered by ``{"result": ...}`` or
``{"error": "<message>"}``. Ownership and access control are enforced on the
other side.

Each call is bounded by a timeout (30 seconds by default). Calls are not
deduplicated or coordinated with one another; concurrent writes to the same
binder are resolved by the backend, last write wins.
"""

import logging
from typing import Any

import httpx

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
)
from photobinder.models.failure import FailureKind, KnownError, NotFoundError
from photobinder.services.timeouts import (
    DEFAULT_TIMEOUT_SECONDS,
    BackendTimeoutError,
    with_timeout,
)

logger = logging.getLogger(__name__)


class BackendError(KnownError):
    """A backend call failed or the backend rejected it."""

    def __init__(self, method: str, message: str, retryable: bool = True):
        self.method = method
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=message,
            detail=f"backend method: {method}",
            suggestion="Press Retry to try again." if retryable else None,
            status_code=502,
            retryable=retryable,
        )


class BackendClient:
    """Typed wrapper over the backend RPC surface."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def call(self, method: str, **params: Any) -> Any:
        """
        Invoke one backend method.

        Raises:
            BackendTimeoutError: If no answer arrives within the timeout
            BackendError: On transport failure, HTTP error, or backend-reported error
        """
        logger.debug("Calling backend method %s", method)
        return await with_timeout(self._post(method, params), self.timeout_seconds, method)

    async def _post(self, method: str, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}/rpc/{method}"
        try:
            response = await self._client.post(url, json=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(method, self.timeout_seconds) from e
        except httpx.HTTPStatusError as e:
            logger.error("Backend %s returned HTTP %s", method, e.response.status_code)
            raise BackendError(
                method, f"The server returned an error (HTTP {e.response.status_code})."
            ) from e
        except httpx.RequestError as e:
            logger.error("Backend %s unreachable: %s", method, e)
            raise BackendError(method, "Could not reach the server.") from e
        except ValueError as e:
            raise BackendError(method, "The server sent an unreadable response.") from e

        if isinstance(payload, dict) and payload.get("error"):
            raise BackendError(method, str(payload["error"]), retryable=False)
        if isinstance(payload, dict):
            return payload.get("result")
        return payload

    # --- Binders ---

    async def get_binders(self) -> list[Binder]:
        result = await self.call("getBinders")
        binders = [Binder.model_validate(item) for item in result or []]
        logger.info("Fetched %d binders", len(binders))
        return binders

    async def create_binder(self, name: str, theme: BinderTheme) -> str:
        return await self.call("createBinder", name=name, theme=theme.to_wire())

    async def delete_binder(self, binder_id: str) -> None:
        await self.call("deleteBinder", binderId=binder_id)

    async def update_binder_theme(self, binder_id: str, theme: BinderTheme) -> None:
        await self.call("updateBinderTheme", binderId=binder_id, newTheme=theme.to_wire())

    async def reorder_cards(self, binder_id: str, new_order: list[str]) -> None:
        await self.call("reorderCards", binderId=binder_id, newOrder=list(new_order))

    async def get_binders_by_user(self, user_principal: str) -> list[Binder]:
        result = await self.call("getBindersByUser", user=user_principal)
        return [Binder.model_validate(item) for item in result or []]

    # --- Photocards ---

    async def add_photocard(
        self,
        binder_id: str,
        name: str,
        image_url: str,
        position: CardPosition,
        quantity: int,
        rarity: CardRarity,
        condition: CardCondition,
    ) -> str:
        return await self.call(
            "addPhotocard",
            binderId=binder_id,
            name=name,
            image=image_url,
            position=position.to_wire(),
            quantity=quantity,
            rarity=rarity.value,
            condition=condition.value,
        )

    async def update_photocard(
        self,
        binder_id: str,
        card_id: str,
        name: str,
        image_url: str,
        position: CardPosition,
        quantity: int,
        rarity: CardRarity,
        condition: CardCondition,
    ) -> None:
        await self.call(
            "updatePhotocard",
            binderId=binder_id,
            cardId=card_id,
            name=name,
            image=image_url,
            position=position.to_wire(),
            quantity=quantity,
            rarity=rarity.value,
            condition=condition.value,
        )

    async def delete_photocard(self, binder_id: str, card_id: str) -> None:
        await self.call("deletePhotocard", binderId=binder_id, cardId=card_id)

    # --- Profile & subscription ---

    async def get_caller_user_profile(self) -> UserProfile | None:
        # The only backend call with a built-in retry
        try:
            result = await self.call("getCallerUserProfile")
        except (BackendError, BackendTimeoutError) as e:
            logger.warning("Profile fetch failed, retrying once: %s", e)
            result = await self.call("getCallerUserProfile")
        return UserProfile.model_validate(result) if result else None

    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        await self.call("saveCallerUserProfile", profile=profile.to_wire())

    async def get_subscription_status(self) -> SubscriptionStatus:
        return SubscriptionStatus(await self.call("getSubscriptionStatus"))

    async def update_subscription_status(
        self, user_principal: str, status: SubscriptionStatus
    ) -> None:
        await self.call("updateSubscriptionStatus", user=user_principal, status=status.value)

    # --- Admin content ---

    async def get_admin_content_settings(self) -> AdminContentSettings:
        result = await self.call("getAdminContentSettings")
        return AdminContentSettings.model_validate(result or {})

    async def update_admin_content_settings(self, content: AdminContentSettings) -> None:
        await self.call("updateAdminContentSettings", settings=content.to_wire())

    async def authenticate_master_admin_key(self, key: str) -> bool:
        return bool(await self.call("authenticateMasterAdminKey", key=key))

    async def update_master_admin_key(self, new_key: str) -> None:
        await self.call("updateMasterAdminKey", newKey=new_key)

    async def get_all_users(self) -> list[UserAnalytics]:
        result = await self.call("getAllUsers")
        return [UserAnalytics.model_validate(item) for item in result or []]

    async def get_filtered_users(self, email_filter: str) -> list[UserAnalytics]:
        result = await self.call("getFilteredUsers", filter=email_filter)
        return [UserAnalytics.model_validate(item) for item in result or []]

    async def save_stripe_keys(self, keys: StripeKeys) -> None:
        await self.call(
            "saveStripeKeys",
            publishableKey=keys.publishable_key,
            secretKey=keys.secret_key,
        )

    # --- Layouts ---

    async def get_layout_presets(self) -> list[str]:
        return list(await self.call("getLayoutPresets") or [])

    async def add_layout_preset(self, layout: str) -> None:
        await self.call("addLayoutPreset", layout=layout)

    async def remove_layout_preset(self, layout: str) -> None:
        await self.call("removeLayoutPreset", layout=layout)

    async def get_default_layout(self) -> str | None:
        return await self.call("getDefaultLayout")

    async def set_default_layout(self, layout: str) -> None:
        await self.call("setDefaultLayout", layout=layout)

    async def get_user_layout(self) -> str | None:
        return await self.call("getUserLayout")

    async def update_user_layout(self, layout: str) -> None:
        await self.call("updateUserLayout", layout=layout)


def find_binder(binders: list[Binder], binder_id: str) -> Binder:
    """
    Pick a binder out of the fetched set.

    Raises:
        NotFoundError: If no binder has that id
    """
    for binder in binders:
        if binder.id == binder_id:
            return binder
    raise NotFoundError("binder", binder_id)


def find_card(binder: Binder, card_id: str) -> Photocard:
    """
    Pick a card out of a binder.

    Raises:
        NotFoundError: If the binder has no card with that id
    """
    for card in binder.cards:
        if card.id == card_id:
            return card
    raise NotFoundError("card", card_id)
