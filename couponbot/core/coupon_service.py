from couponbot.core.coupon_store import CouponStore, CouponUpdate, NewCoupon
from couponbot.core.dates import format_canonical, parse_flexible_date
from couponbot.core.errors import CouponNotFoundError, DuplicateCodeError

# Editable fields as typed by admins -> CouponUpdate attribute
EDIT_FIELDS = {
    "code": "code",
    "type": "type",
    "used": "used",
    "usedby": "used_by",
    "useddate": "used_date",
    "note": "note",
    "from": "valid_from",
    "validfrom": "valid_from",
    "to": "valid_to",
    "validto": "valid_to",
}
TRUE_VALUES = {"1", "true", "yes", "ja", "y"}


def canonical_date(value: str) -> str:
    """Write path: dd/mm/yyyy (or ISO / serial) in, dd/mm/yyyy out."""
    return format_canonical(parse_flexible_date(value))


def create_coupon(store: CouponStore, code: str, valid_from: str, valid_to: str, coupon_type: str = "") -> int:
    """Creates a single coupon after checking the code is free."""
    code = code.strip().upper()
    if store.fetch_by_code(code):
        raise DuplicateCodeError(code)

    return store.create(NewCoupon(
        code=code,
        type=coupon_type.strip(),
        valid_from=canonical_date(valid_from),
        valid_to=canonical_date(valid_to),
    ))


def build_update(field: str, value: str) -> CouponUpdate:
    key = field.strip().lower().replace("_", "")
    if key not in EDIT_FIELDS:
        raise ValueError(f"Unknown field: {field}")

    attribute = EDIT_FIELDS[key]
    if attribute == "used":
        parsed = value.strip().lower() in TRUE_VALUES
    elif attribute in ("valid_from", "valid_to"):
        parsed = canonical_date(value)
    else:
        parsed = value.strip()
    return CouponUpdate(**{attribute: parsed})


def edit_coupon(store: CouponStore, code: str, field: str, value: str) -> str:
    """Applies one field change to the coupon with this code. Returns the (new) code."""
    code = code.strip().upper()
    coupon = store.fetch_by_code(code)
    if coupon is None:
        raise CouponNotFoundError(code)

    changes = build_update(field, value)
    if changes.code is not None:
        changes.code = changes.code.upper()
        other = store.fetch_by_code(changes.code)
        if other is not None and other.id != coupon.id:
            raise DuplicateCodeError(changes.code)

    store.update(coupon.id, changes)
    return changes.code or code


def find_coupon(store: CouponStore, code: str):
    code = code.strip().upper()
    coupon = store.fetch_by_code(code)
    if coupon is None:
        raise CouponNotFoundError(code)
    return coupon
