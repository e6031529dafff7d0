"""
Lockout state machine for account login attempts.

Pure functions over an account object (anything with failed_attempts, locked_until
and lockout_stage attributes) and an explicit `now`. Callers load the account
row under a lock and persist the mutation in the same transaction.
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from app.core.config import parse_lockout_stages
from app.schemas.auth import AccountKind

if TYPE_CHECKING:
    from app.core.config import Settings


class LockableAccount(Protocol):
    failed_attempts: int
    locked_until: datetime | None
    lockout_stage: int


@dataclass(frozen=True)
class LockoutStage:
    """Lock after `max_attempts` consecutive failures; `duration=None` locks permanently."""

    max_attempts: int
    duration: timedelta | None


@dataclass(frozen=True)
class LockoutPolicy:
    """
    Ordered lockout stages. The account's lockout_stage selects the active stage;
    past the end, the last stage repeats (unless it is permanent).
    """

    stages: tuple[LockoutStage, ...]

    def stage_for(self, lockout_stage: int) -> LockoutStage:
        return self.stages[min(max(lockout_stage, 0), len(self.stages) - 1)]

    def is_permanent(self, lockout_stage: int) -> bool:
        last = self.stages[-1]
        return last.duration is None and lockout_stage >= len(self.stages)


@dataclass(frozen=True)
class LockStatus:
    """Result of checking an account before credentials are evaluated."""

    locked: bool
    permanent: bool = False
    remaining_minutes: int = 0


@dataclass(frozen=True)
class FailureOutcome:
    """Result of recording a wrong password."""

    locked: bool
    permanent: bool = False
    remaining_attempts: int = 0
    lockout_minutes: int | None = None


def build_policy(kind: AccountKind, settings: "Settings") -> LockoutPolicy:
    """Single repeating stage for admins/suppliers; progressive stages for mobile users."""
    if kind is AccountKind.MOBILE_USER:
        return LockoutPolicy(
            stages=tuple(
                LockoutStage(
                    max_attempts=attempts,
                    duration=timedelta(minutes=minutes) if minutes else None,
                )
                for attempts, minutes in parse_lockout_stages(settings.MOBILE_LOCKOUT_STAGES)
            )
        )
    return LockoutPolicy(
        stages=(
            LockoutStage(
                max_attempts=settings.MAX_FAILED_ATTEMPTS,
                duration=timedelta(minutes=settings.LOCKOUT_DURATION_MINUTES),
            ),
        )
    )


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps read back from the store as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def check_lock(account: LockableAccount, policy: LockoutPolicy, now: datetime) -> LockStatus:
    """
    Evaluate the lock before the password is checked.

    An expired lock is cleared here (lazy expiry): failed_attempts and
    locked_until reset, lockout_stage is kept for escalation.
    """
    if policy.is_permanent(account.lockout_stage or 0):
        return LockStatus(locked=True, permanent=True)
    locked_until = as_utc(account.locked_until)
    if locked_until is None:
        return LockStatus(locked=False)
    if now < locked_until:
        remaining = math.ceil((locked_until - now).total_seconds() / 60)
        return LockStatus(locked=True, remaining_minutes=max(remaining, 1))
    account.failed_attempts = 0
    account.locked_until = None
    return LockStatus(locked=False)


def record_failure(account: LockableAccount, policy: LockoutPolicy, now: datetime) -> FailureOutcome:
    """Count one wrong password; lock the account when the active stage's limit is reached."""
    stage_index = account.lockout_stage or 0
    stage = policy.stage_for(stage_index)
    attempts = (account.failed_attempts or 0) + 1
    account.failed_attempts = attempts
    if attempts < stage.max_attempts:
        return FailureOutcome(locked=False, remaining_attempts=stage.max_attempts - attempts)

    account.lockout_stage = stage_index + 1
    if stage.duration is None:
        account.locked_until = None
        return FailureOutcome(locked=True, permanent=True)
    account.locked_until = now + stage.duration
    return FailureOutcome(
        locked=True,
        lockout_minutes=int(stage.duration.total_seconds() // 60),
    )


def record_success(account: LockableAccount) -> None:
    """Correct password: clear the failure counter and any lock."""
    account.failed_attempts = 0
    account.locked_until = None


def unlock(account: LockableAccount) -> None:
    """Administrative override: back to a clean, unlocked state including the stage."""
    account.failed_attempts = 0
    account.locked_until = None
    account.lockout_stage = 0


def is_locked(account: LockableAccount, policy: LockoutPolicy, now: datetime) -> bool:
    """Read-only lock check (no lazy reset)."""
    if policy.is_permanent(account.lockout_stage or 0):
        return True
    locked_until = as_utc(account.locked_until)
    return locked_until is not None and now < locked_until
