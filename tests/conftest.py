import pytest

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
from photobinder.models.failure import KnownError
from photobinder.services.admin import reset_attempt_tracker, reset_session_store
from photobinder.services.storage import MemoryKeyValueStore


def make_card(index: int, **overrides) -> Photocard:
    """A card with predictable id, name and image URL."""
    fields = {
        "id": f"card-{index}",
        "name": f"Card {index}",
        "created": 1_700_000_000_000_000_000 + index,
        "image": f"https://blobs.test/card-{index}.jpg",
    }
    fields.update(overrides)
    return Photocard(**fields)


def make_binder(card_count: int, binder_id: str = "binder-1", name: str = "My Binder") -> Binder:
    return Binder(id=binder_id, name=name, cards=[make_card(i) for i in range(card_count)])


class FakeBackend:
    """
    In-memory stand-in for the backend RPC client.

    Methods listed in ``failures`` raise the given error instead of running.
    """

    def __init__(self, binders: list[Binder] | None = None) -> None:
        self.binders: dict[str, Binder] = {b.id: b for b in binders or []}
        self.failures: dict[str, KnownError] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.subscription = SubscriptionStatus.FREE
        self.profile: UserProfile | None = UserProfile(name="Mina")
        self.content = AdminContentSettings(terms_and_conditions="Be kind.")
        self.master_key = "open-sesame"
        self.presets = ["3x3", "4x3"]
        self.default_layout: str | None = "3x3"
        self.user_layout: str | None = None
        self.users = [
            UserAnalytics(principal="user-a", email="Mina@Example.com", binder_count=2),
            UserAnalytics(principal="user-b", email="jo@test.org"),
            UserAnalytics(principal="user-c", email=None),
        ]
        self.user_binders: dict[str, list[Binder]] = {}
        self.stripe_keys: StripeKeys | None = None

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, args))
        if method in self.failures:
            raise self.failures[method]

    def called(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    async def get_binders(self) -> list[Binder]:
        self._record("get_binders")
        return list(self.binders.values())

    async def create_binder(self, name: str, theme: BinderTheme) -> str:
        self._record("create_binder", name, theme)
        binder_id = f"binder-{len(self.binders) + 1}"
        self.binders[binder_id] = Binder(id=binder_id, name=name, theme=theme)
        return binder_id

    async def delete_binder(self, binder_id: str) -> None:
        self._record("delete_binder", binder_id)
        self.binders.pop(binder_id, None)

    async def update_binder_theme(self, binder_id: str, theme: BinderTheme) -> None:
        self._record("update_binder_theme", binder_id, theme)
        self.binders[binder_id].theme = theme

    async def reorder_cards(self, binder_id: str, new_order: list[str]) -> None:
        self._record("reorder_cards", binder_id, new_order)
        binder = self.binders[binder_id]
        by_id = {card.id: card for card in binder.cards}
        binder.cards = [by_id[card_id] for card_id in new_order]

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
        self._record("add_photocard", binder_id, name)
        binder = self.binders[binder_id]
        card = Photocard(
            id=f"new-{len(binder.cards)}",
            name=name,
            image=image_url,
            position=position,
            quantity=quantity,
            rarity=rarity,
            condition=condition,
        )
        binder.cards.append(card)
        return card.id

    async def update_photocard(self, binder_id: str, card_id: str, **fields) -> None:
        self._record("update_photocard", binder_id, card_id)

    async def delete_photocard(self, binder_id: str, card_id: str) -> None:
        self._record("delete_photocard", binder_id, card_id)
        binder = self.binders[binder_id]
        binder.cards = [card for card in binder.cards if card.id != card_id]

    async def get_caller_user_profile(self) -> UserProfile | None:
        self._record("get_caller_user_profile")
        return self.profile

    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        self._record("save_caller_user_profile", profile)
        self.profile = profile

    async def get_subscription_status(self) -> SubscriptionStatus:
        self._record("get_subscription_status")
        return self.subscription

    async def update_subscription_status(self, principal: str, status: SubscriptionStatus) -> None:
        self._record("update_subscription_status", principal, status)

    async def get_admin_content_settings(self) -> AdminContentSettings:
        self._record("get_admin_content_settings")
        return self.content

    async def update_admin_content_settings(self, content: AdminContentSettings) -> None:
        self._record("update_admin_content_settings", content)
        self.content = content

    async def authenticate_master_admin_key(self, key: str) -> bool:
        self._record("authenticate_master_admin_key", key)
        return key == self.master_key

    async def update_master_admin_key(self, new_key: str) -> None:
        self._record("update_master_admin_key", new_key)
        self.master_key = new_key

    async def get_all_users(self) -> list[UserAnalytics]:
        self._record("get_all_users")
        return list(self.users)

    async def get_filtered_users(self, email_filter: str) -> list[UserAnalytics]:
        self._record("get_filtered_users", email_filter)
        return [u for u in self.users if u.email and email_filter.lower() in u.email.lower()]

    async def get_binders_by_user(self, principal: str) -> list[Binder]:
        self._record("get_binders_by_user", principal)
        return self.user_binders.get(principal, [])

    async def get_layout_presets(self) -> list[str]:
        self._record("get_layout_presets")
        return list(self.presets)

    async def add_layout_preset(self, layout: str) -> None:
        self._record("add_layout_preset", layout)
        self.presets.append(layout)

    async def remove_layout_preset(self, layout: str) -> None:
        self._record("remove_layout_preset", layout)
        self.presets = [p for p in self.presets if p != layout]

    async def get_default_layout(self) -> str | None:
        self._record("get_default_layout")
        return self.default_layout

    async def set_default_layout(self, layout: str) -> None:
        self._record("set_default_layout", layout)
        self.default_layout = layout

    async def get_user_layout(self) -> str | None:
        self._record("get_user_layout")
        return self.user_layout

    async def update_user_layout(self, layout: str) -> None:
        self._record("update_user_layout", layout)
        self.user_layout = layout

    async def save_stripe_keys(self, keys: StripeKeys) -> None:
        self._record("save_stripe_keys", keys)
        self.stripe_keys = keys


@pytest.fixture(autouse=True)
def reset_admin_state():
    """Admin trackers are process-wide; start every test from a clean slate."""
    reset_attempt_tracker()
    reset_session_store()
    yield
    reset_attempt_tracker()
    reset_session_store()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend([make_binder(25)])


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def binder_factory():
    return make_binder


@pytest.fixture
def backend_factory():
    return FakeBackend
