"""Credit gate - decides whether a user may start a run and charges for it.

Priority order for both checking and charging:
  1. premium subscription with an end date in the future (never charged)
  2. purchased points (one point per run)
  3. free monthly quota (counter incremented per run)

The free quota resets lazily: the first access on or after the reset date
zeroes the counter and moves the reset date to the first day of the
following month.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from jasaoseo.errors import AuthError, CreditDeniedError
from jasaoseo.models.user import CreditBalance, UserProfile
from jasaoseo.storage.user_store import UserStore

logger = logging.getLogger(__name__)

FREE_MONTHLY_LIMIT = 1


def first_of_next_month(now: datetime) -> datetime:
    if now.month == 12:
        return datetime(now.year + 1, 1, 1)
    return datetime(now.year, now.month + 1, 1)


def apply_monthly_reset(profile: UserProfile, now: datetime) -> UserProfile:
    """Return the profile with the free counter reset if the reset date has passed."""
    reset_date = profile.free_monthly_reset_date
    if reset_date is None or now >= reset_date:
        return profile.model_copy(
            update={"free_monthly_used": 0, "free_monthly_reset_date": first_of_next_month(now)}
        )
    return profile


def can_run(profile: UserProfile, now: datetime, free_limit: int = FREE_MONTHLY_LIMIT) -> bool:
    if profile.has_active_subscription(now):
        return True
    if profile.points > 0:
        return True
    return profile.free_monthly_used < free_limit


def remaining(
    profile: UserProfile, now: datetime, free_limit: int = FREE_MONTHLY_LIMIT
) -> CreditBalance:
    if profile.has_active_subscription(now):
        return CreditBalance(type="unlimited", count=-1)
    if profile.points > 0:
        return CreditBalance(type="points", count=profile.points)
    return CreditBalance(type="free", count=max(0, free_limit - profile.free_monthly_used))


def consume(
    profile: UserProfile, now: datetime, free_limit: int = FREE_MONTHLY_LIMIT
) -> UserProfile:
    """Return the profile after one run has been charged."""
    if not can_run(profile, now, free_limit):
        raise CreditDeniedError("사용 가능한 크레딧이 없습니다. 포인트를 충전하거나 구독해주세요.")
    if profile.has_active_subscription(now):
        return profile
    if profile.points > 0:
        return profile.model_copy(update={"points": profile.points - 1})
    return profile.model_copy(update={"free_monthly_used": profile.free_monthly_used + 1})


class CreditGate:
    """Applies the credit rules to stored profiles.

    Writes are optimistic: two concurrent runs for the same user may both
    pass ``can_run`` before either is charged.
    """

    def __init__(self, store: UserStore, free_monthly_limit: int = FREE_MONTHLY_LIMIT):
        self.store = store
        self.free_monthly_limit = free_monthly_limit

    def load(self, uid: str, now: datetime | None = None) -> UserProfile:
        """Fetch a profile, persisting a monthly reset if one is due."""
        now = now or datetime.now()
        profile = self.store.get(uid)
        if profile is None:
            raise AuthError(f"알 수 없는 사용자입니다: {uid}")
        updated = apply_monthly_reset(profile, now)
        if updated is not profile:
            logger.info("Free quota reset for %s (next reset %s)", uid, updated.free_monthly_reset_date)
            self.store.save(updated)
        return updated

    def can_run(self, uid: str, now: datetime | None = None) -> bool:
        now = now or datetime.now()
        return can_run(self.load(uid, now), now, self.free_monthly_limit)

    def check(self, uid: str, now: datetime | None = None) -> None:
        """Raise CreditDeniedError unless the user may start a run."""
        if not self.can_run(uid, now):
            raise CreditDeniedError("사용 가능한 크레딧이 없습니다. 포인트를 충전하거나 구독해주세요.")

    def remaining(self, uid: str, now: datetime | None = None) -> CreditBalance:
        now = now or datetime.now()
        return remaining(self.load(uid, now), now, self.free_monthly_limit)

    def consume(self, uid: str, now: datetime | None = None) -> UserProfile:
        now = now or datetime.now()
        profile = self.load(uid, now)
        charged = consume(profile, now, self.free_monthly_limit)
        if charged is not profile:
            self.store.save(charged)
        logger.info("Charged run for %s: %s", uid, remaining(charged, now, self.free_monthly_limit))
        return charged

    def add_points(self, uid: str, points: int) -> UserProfile:
        """Credit purchased points after a completed checkout."""
        if points <= 0:
            raise ValueError(f"points must be positive, got {points}")
        profile = self.load(uid)
        updated = profile.model_copy(update={"points": profile.points + points})
        self.store.save(updated)
        return updated

    def activate_subscription(
        self, uid: str, days: int = 30, now: datetime | None = None
    ) -> UserProfile:
        """Start or extend a premium subscription by ``days``."""
        now = now or datetime.now()
        profile = self.load(uid, now)
        start = profile.subscription_end_date if profile.has_active_subscription(now) else now
        updated = profile.model_copy(
            update={
                "subscription_status": "premium",
                "subscription_end_date": start + timedelta(days=days),
            }
        )
        self.store.save(updated)
        return updated
