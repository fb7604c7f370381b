import enum
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from couponbot.core.coupon_store import CouponStore
from couponbot.core.dates import day_bounds, format_canonical, format_for_display, format_long, parse_flexible_date
from couponbot.core.errors import EmptyCodeError, MissingValidityWindowError, RecordIdMissingError
from couponbot.core.i18n import escape, translate

logger = logging.getLogger(__name__)


class RedemptionStatus(enum.Enum):
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"
    NO_VALIDITY_WINDOW = "no_validity_window"
    REDEEMED = "redeemed"
    ERROR = "error"


@dataclass
class RedemptionOutcome:
    status: RedemptionStatus
    message: str
    code: str = ""
    used_by: str = ""
    used_date: str = ""
    valid_from: str = ""
    valid_to: str = ""

    @property
    def success(self) -> bool:
        return self.status is RedemptionStatus.REDEEMED


def normalize_code(code: Optional[str]) -> str:
    """Trims and upper-cases a submitted code."""
    normalized = (code or "").strip().upper()
    if not normalized:
        raise EmptyCodeError()
    return normalized


def already_used(coupon, code: str = "") -> RedemptionOutcome:
    used_by = coupon.used_by or translate("unknown")
    used_date = format_for_display(coupon.used_date or "")
    return RedemptionOutcome(
        status=RedemptionStatus.ALREADY_USED,
        message=translate("redeem.already_used", used_by=escape(used_by), used_date=escape(used_date)),
        code=code,
        used_by=used_by,
        used_date=used_date,
    )


def validity_window(coupon):
    """Parsed (valid_from, valid_to) of a coupon, day first."""
    if not coupon.valid_from or not coupon.valid_to:
        raise MissingValidityWindowError()
    return parse_flexible_date(coupon.valid_from), parse_flexible_date(coupon.valid_to)


def evaluate_coupon(coupon, today: date) -> Optional[RedemptionOutcome]:
    """
    Decides whether a looked up coupon may be redeemed today.

    Returns the rejection outcome, or None when the coupon is redeemable.
    Raises InvalidDateError for unreadable validity dates.
    """
    code = coupon.code or ""
    if coupon.used:
        return already_used(coupon, code)

    try:
        valid_from, valid_to = validity_window(coupon)
    except MissingValidityWindowError as e:
        return RedemptionOutcome(status=RedemptionStatus.NO_VALIDITY_WINDOW, message=e.message, code=code)

    now, _ = day_bounds(today)
    start, _ = day_bounds(valid_from)
    _, end = day_bounds(valid_to)

    if now < start:
        shown = format_canonical(valid_from)
        return RedemptionOutcome(
            status=RedemptionStatus.NOT_YET_VALID,
            message=translate("redeem.not_yet_valid", valid_from=shown),
            code=code,
            valid_from=shown,
        )

    if now > end:
        shown = format_canonical(valid_to)
        return RedemptionOutcome(
            status=RedemptionStatus.EXPIRED,
            message=translate("redeem.expired", valid_to=shown),
            code=code,
            valid_to=shown,
        )

    return None


def redeem_coupon(store: CouponStore, code: str, today: Optional[date] = None,
                  used_by: Optional[str] = None) -> RedemptionOutcome:
    """Looks up, validates and marks a coupon as used. Never raises."""
    today = today or date.today()
    normalized = ""

    try:
        normalized = normalize_code(code)
        coupon = store.fetch_by_code(normalized)

        if coupon is None:
            logger.info(f"Redeem {normalized}: not found")
            return RedemptionOutcome(
                status=RedemptionStatus.NOT_FOUND,
                message=translate("redeem.not_found"),
                code=normalized,
            )

        rejected = evaluate_coupon(coupon, today)
        if rejected is not None:
            logger.info(f"Redeem {normalized}: {rejected.status.value}")
            return rejected

        if not coupon.id:
            raise RecordIdMissingError()

        applied = store.mark_used(
            coupon.id,
            used_by=used_by or translate("unknown"),
            used_date=format_long(today),
            note="",
        )

        if not applied:
            # Somebody else redeemed it between our read and write
            logger.info(f"Redeem {normalized}: lost race")
            winner = store.fetch_by_id(coupon.id) or coupon
            return already_used(winner, normalized)

        logger.info(f"Redeem {normalized}: redeemed")
        return RedemptionOutcome(
            status=RedemptionStatus.REDEEMED,
            message=translate("redeem.success"),
            code=normalized,
        )

    except Exception as e:
        logger.error(f"Redeem {normalized or code!r} failed: {e}")
        message = getattr(e, "message", "") or escape(e) or translate("redeem.error")
        return RedemptionOutcome(status=RedemptionStatus.ERROR, message=message, code=normalized)
