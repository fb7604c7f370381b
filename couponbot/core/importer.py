"""
Bulk import of coupons from spreadsheet files.

Expected columns (by position, header row optional):
    A: code, B: type, C: validFrom, D: validTo
"""
import io
import logging
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import pandas as pd

from couponbot.core.coupon_store import CouponStore, NewCoupon
from couponbot.core.dates import format_canonical, parse_flexible_date
from couponbot.core.errors import EmptyFileError, InvalidDateError, NoSheetError, UnsupportedFileTypeError
from couponbot.core.i18n import translate

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")
PREFERRED_SHEET = "Sheet1"
HEADER_KEYWORDS = {"code", "type", "validfrom", "validto", "valid_from", "valid_to", "from", "to"}


@dataclass
class ImportReport:
    total: int
    inserted: int
    duplicates: int


def _clean_frame(frame: pd.DataFrame) -> List[List[Any]]:
    frame = frame.astype(object).where(pd.notna(frame), "")
    return frame.values.tolist()


def extract_rows(filename: str, content: bytes) -> List[List[Any]]:
    """Reads the first usable sheet of an Excel or CSV file into raw rows."""
    name = (filename or "").lower()
    if not name.endswith(SUPPORTED_EXTENSIONS):
        raise UnsupportedFileTypeError(filename)

    try:
        if name.endswith(".csv"):
            frame = pd.read_csv(io.BytesIO(content), header=None, dtype=object,
                                keep_default_na=False, skip_blank_lines=True)
        else:
            sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, header=None)
            if not sheets:
                raise NoSheetError(PREFERRED_SHEET)
            sheet_name = PREFERRED_SHEET if PREFERRED_SHEET in sheets else next(iter(sheets))
            frame = sheets[sheet_name]
    except pd.errors.EmptyDataError:
        raise EmptyFileError()

    rows = _clean_frame(frame)
    if not rows:
        raise EmptyFileError()

    logger.info(f"Extracted {len(rows)} rows from {filename}")
    return rows


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _normalize_date(value) -> str:
    """Canonical dd/mm/yyyy, or the trimmed original when unreadable."""
    if isinstance(value, str):
        value = value.strip()
    try:
        return format_canonical(parse_flexible_date(value))
    except InvalidDateError:
        return _cell_text(value)


def has_header(row: Sequence[Any]) -> bool:
    return any(_cell_text(cell).lower() in HEADER_KEYWORDS for cell in row)


def normalize_rows(rows: Sequence[Sequence[Any]]) -> List[NewCoupon]:
    """Maps raw spreadsheet rows to new coupon records."""
    if not rows:
        raise EmptyFileError()

    start = 1 if has_header(rows[0]) else 0
    coupons = []

    for row in rows[start:]:
        if not row:
            continue
        cells = list(row) + [""] * (4 - len(row))
        code = _cell_text(cells[0]).upper()
        coupon_type = _cell_text(cells[1])
        valid_from = cells[2]
        valid_to = cells[3]

        # Code and both dates are mandatory
        if not code or not _cell_text(valid_from) or not _cell_text(valid_to):
            continue

        coupons.append(NewCoupon(
            code=code,
            type=coupon_type,
            valid_from=_normalize_date(valid_from),
            valid_to=_normalize_date(valid_to),
        ))

    if not coupons:
        raise EmptyFileError(translate("import.no_rows"))
    return coupons


def split_duplicates(coupons: Sequence[NewCoupon], existing_codes) -> Tuple[List[NewCoupon], int]:
    """Drops coupons whose code is already stored or repeated in the batch."""
    seen = {code.upper() for code in existing_codes}
    fresh = []
    for coupon in coupons:
        code = coupon.code.upper()
        if code in seen:
            continue
        seen.add(code)
        fresh.append(coupon)
    return fresh, len(coupons) - len(fresh)


def import_coupons(store: CouponStore, rows: Sequence[Sequence[Any]]) -> ImportReport:
    coupons = normalize_rows(rows)
    existing = [coupon.code for coupon in store.fetch_all() if coupon.code]
    fresh, duplicates = split_duplicates(coupons, existing)

    inserted = store.create_many(fresh) if fresh else 0
    logger.info(f"Import: {inserted} inserted, {duplicates} duplicates")
    return ImportReport(total=len(coupons), inserted=inserted, duplicates=duplicates)


def import_file(store: CouponStore, filename: str, content: bytes) -> ImportReport:
    return import_coupons(store, extract_rows(filename, content))
