from dataclasses import dataclass
from datetime import date, timedelta

from ..core.enums import MembershipStatus
from ..models.user import User


@dataclass
class MembershipState:
    days_remaining: int
    is_expired: bool
    is_active: bool
    has_valid_membership: bool


def membership_state(user: User, today: date) -> MembershipState:
    start, end = user.membership_start_date, user.membership_end_date
    if not end:
        return MembershipState(0, False, False, bool(start and end))
    remaining = (end - today).days
    is_expired = remaining < 0
    is_active = (
        start is not None
        and start <= today <= end
        and user.membership_status == MembershipStatus.ACTIVE
    )
    return MembershipState(
        days_remaining=max(0, remaining),
        is_expired=is_expired,
        is_active=is_active,
        has_valid_membership=bool(start and end),
    )


def expire_if_needed(user: User, today: date) -> bool:
    """Flip an ACTIVE membership past its end date to EXPIRED. Returns True when changed."""
    state = membership_state(user, today)
    if state.is_expired and user.membership_status == MembershipStatus.ACTIVE:
        user.membership_status = MembershipStatus.EXPIRED
        return True
    return False


def derive_status(start: date, duration_days: int, today: date) -> tuple[date, MembershipStatus]:
    end = start + timedelta(days=duration_days)
    if start > today:
        return end, MembershipStatus.INACTIVE
    if end < today:
        return end, MembershipStatus.EXPIRED
    return end, MembershipStatus.ACTIVE
