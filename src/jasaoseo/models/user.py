"""Pydantic models for user profiles and credit balances."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

SubscriptionStatus = Literal["free", "premium", "cancelled", "expired"]


class UserProfile(BaseModel):
    uid: str
    email: str
    display_name: str | None = None
    subscription_status: SubscriptionStatus = "free"
    subscription_end_date: datetime | None = None
    free_monthly_used: int = 0
    free_monthly_reset_date: datetime | None = None
    points: int = 0  # purchased run credits
    created_at: datetime = Field(default_factory=datetime.now)

    def has_active_subscription(self, now: datetime) -> bool:
        return (
            self.subscription_status == "premium"
            and self.subscription_end_date is not None
            and self.subscription_end_date > now
        )


class CreditBalance(BaseModel):
    """What the header shows: unlimited (count -1), remaining points or free runs."""

    type: Literal["unlimited", "points", "free"]
    count: int

    @property
    def is_unlimited(self) -> bool:
        return self.type == "unlimited"
