from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from couponbot.core.dates import format_for_display, parse_flexible_date
from couponbot.core.errors import InvalidDateError
from couponbot.core.i18n import escape

SORT_FIELDS = ("code", "type", "valid_from", "valid_to", "used", "used_by")
DATE_FIELDS = ("valid_from", "valid_to")


@dataclass
class CouponStatistics:
    total: int = 0
    used: int = 0
    unused: int = 0
    expired: int = 0
    active: int = 0


def _safe_date(value) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_flexible_date(value)
    except InvalidDateError:
        return None


def coupon_statistics(coupons: Sequence, today: Optional[date] = None) -> CouponStatistics:
    """Counts used / unused coupons; unused ones split into active and expired."""
    today = today or date.today()
    stats = CouponStatistics(total=len(coupons))

    for coupon in coupons:
        if coupon.used:
            stats.used += 1
            continue

        stats.unused += 1
        valid_to = _safe_date(coupon.valid_to)
        # Unreadable end dates count as active
        if valid_to is not None and today > valid_to:
            stats.expired += 1
        else:
            stats.active += 1

    return stats


def _sort_key(field: str):
    def key(coupon):
        value = getattr(coupon, field)
        if field in DATE_FIELDS:
            parsed = _safe_date(value)
            # Unreadable dates go last
            return (parsed is None, parsed or date.min)
        if isinstance(value, bool):
            return (False, int(value))
        return (False, (value or "").lower())
    return key


def search_coupons(coupons: Sequence, term: str = "", sort_field: Optional[str] = None,
                   descending: bool = False) -> List:
    """Filters by code substring (case insensitive) and optionally sorts."""
    term = (term or "").strip().upper()
    result = [c for c in coupons if term in (c.code or "").upper()] if term else list(coupons)

    if sort_field:
        if sort_field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {sort_field}")
        result.sort(key=_sort_key(sort_field), reverse=descending)
    return result


def describe_coupon(coupon) -> str:
    """One line summary used in admin listings."""
    state = "✅" if not coupon.used else "🚫"
    line = (f"{state} <code>{escape(coupon.code)}</code> "
            f"{escape(coupon.valid_from or '-')} → {escape(coupon.valid_to or '-')}")
    if coupon.type:
        line += f" | {escape(coupon.type)}"
    if coupon.used:
        line += f"\n   └ {escape(coupon.used_by or '-')}, {escape(format_for_display(coupon.used_date or ''))}"
    return line
