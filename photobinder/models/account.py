"""
Account-level records: profiles, subscriptions, admin content and analytics.
"""

from enum import Enum

from pydantic import Field

from photobinder.models.binder import WireModel


class SubscriptionStatus(str, Enum):
    FREE = "free"
    PRO = "pro"


class UserProfile(WireModel):
    name: str
    display_name: str | None = None
    avatar_url: str | None = None


class AdminContentSettings(WireModel):
    """Global content managed from the admin portal."""

    terms_and_conditions: str = ""
    brand_name: str | None = None
    logo_url: str | None = None


class UserAnalytics(WireModel):
    """One row of the admin user oversight table."""

    principal: str
    email: str | None = None
    join_date: int = 0
    subscription_status: SubscriptionStatus = SubscriptionStatus.FREE
    binder_count: int = Field(default=0, ge=0)
    card_count: int = Field(default=0, ge=0)


class StripeKeys(WireModel):
    publishable_key: str
    secret_key: str
