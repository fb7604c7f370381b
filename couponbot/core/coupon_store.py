import logging
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from couponbot.core.config import BATCH_SIZE
from couponbot.core.errors import StoreOperationError
from couponbot.core.i18n import translate
from couponbot.models.coupon import Coupon

logger = logging.getLogger(__name__)


@dataclass
class NewCoupon:
    """A coupon that is not stored yet."""
    code: str
    valid_from: str
    valid_to: str
    type: str = ""
    used: bool = False
    used_by: str = ""
    used_date: str = ""
    note: str = ""


@dataclass
class CouponUpdate:
    """Partial update: only fields that are not None are written."""
    code: Optional[str] = None
    type: Optional[str] = None
    used: Optional[bool] = None
    used_by: Optional[str] = None
    used_date: Optional[str] = None
    note: Optional[str] = None
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None

    def values(self) -> Dict[str, object]:
        values = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None:
                continue
            if field.name == "code":
                value = value.strip().upper()
            values[field.name] = value
        return values


class CouponFeed:
    """Process wide registry of live coupon list subscribers."""

    def __init__(self):
        self.subscribers: List[Callable[[List[Coupon]], None]] = []

    def add(self, callback):
        self.subscribers.append(callback)

        def unsubscribe():
            if callback in self.subscribers:
                self.subscribers.remove(callback)

        return unsubscribe

    def publish(self, coupons: List[Coupon]):
        for callback in list(self.subscribers):
            try:
                callback(coupons)
            except Exception as e:
                logger.warning(f"Coupon subscriber failed: {e}")


coupon_feed = CouponFeed()


def _chunks(items: Sequence, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class CouponStore:
    """Record store adapter for the coupons table."""

    def __init__(self, db: Session, feed: CouponFeed = coupon_feed, batch_size: int = BATCH_SIZE):
        self.db = db
        self.feed = feed
        self.batch_size = batch_size

    def _fail(self, operation: str, error: Exception):
        logger.error(f"Coupon store {operation} failed: {error}")
        self.db.rollback()
        return StoreOperationError(translate("store.failed", operation=operation))

    def _notify(self):
        if not self.feed.subscribers:
            return
        try:
            coupons = self.fetch_all()
        except StoreOperationError:
            coupons = []
        self.feed.publish(coupons)

    def fetch_all(self) -> List[Coupon]:
        try:
            return self.db.query(Coupon).order_by(Coupon.id).all()
        except SQLAlchemyError as e:
            raise self._fail("fetch_all", e)

    def fetch_by_code(self, code: str) -> Optional[Coupon]:
        try:
            return self.db.query(Coupon).filter(Coupon.code == code.strip().upper()).first()
        except SQLAlchemyError as e:
            raise self._fail("fetch_by_code", e)

    def fetch_by_id(self, coupon_id: int) -> Optional[Coupon]:
        try:
            return self.db.get(Coupon, coupon_id)
        except SQLAlchemyError as e:
            raise self._fail("fetch_by_id", e)

    def _build(self, coupon: NewCoupon) -> Coupon:
        return Coupon(
            code=coupon.code.strip().upper(),
            type=coupon.type or "",
            used=coupon.used,
            used_by=coupon.used_by,
            used_date=coupon.used_date,
            note=coupon.note,
            valid_from=coupon.valid_from,
            valid_to=coupon.valid_to,
        )

    def create(self, coupon: NewCoupon) -> int:
        record = self._build(coupon)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            raise self._fail("create", e)

        logger.info(f"Coupon {record.code} created (id={record.id})")
        self._notify()
        return record.id

    def create_many(self, coupons: Sequence[NewCoupon]) -> int:
        """Inserts in sequential batches; earlier batches stay committed on failure."""
        count = 0
        for batch in _chunks(list(coupons), self.batch_size):
            records = []
            for coupon in batch:
                record = self._build(coupon)
                # Imported coupons always start unused
                record.used = False
                record.used_by = ""
                record.used_date = ""
                record.note = ""
                records.append(record)
            try:
                self.db.add_all(records)
                self.db.commit()
            except SQLAlchemyError as e:
                error = self._fail("create_many", e)
                if count:
                    self._notify()
                raise error
            count += len(records)

        logger.info(f"{count} coupons created in bulk")
        if count:
            self._notify()
        return count

    def update(self, coupon_id: int, changes: CouponUpdate):
        values = changes.values()
        values["updated_at"] = func.now()
        try:
            changed = self.db.query(Coupon).filter(Coupon.id == coupon_id) \
                .update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update", e)

        if not changed:
            raise StoreOperationError(translate("store.not_found", coupon_id=coupon_id))
        self._notify()

    def mark_used(self, coupon_id: int, used_by: str, used_date: str, note: str = "") -> bool:
        """
        Redeems a coupon only if it is still unused.

        Returns False when another redemption got there first.
        """
        try:
            changed = self.db.query(Coupon) \
                .filter(Coupon.id == coupon_id, Coupon.used == False) \
                .update({
                    "used": True,
                    "used_by": used_by,
                    "used_date": used_date,
                    "note": note,
                    "updated_at": func.now(),
                }, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("mark_used", e)

        if changed:
            self._notify()
        return bool(changed)

    def delete(self, coupon_id: int):
        try:
            self.db.query(Coupon).filter(Coupon.id == coupon_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete", e)

        logger.info(f"Coupon id={coupon_id} deleted")
        self._notify()

    def delete_all(self) -> int:
        """Deletes in sequential batches; earlier batches stay committed on failure."""
        try:
            ids = [row.id for row in self.db.query(Coupon.id).all()]
        except SQLAlchemyError as e:
            raise self._fail("delete_all", e)

        deleted = 0
        for batch in _chunks(ids, self.batch_size):
            try:
                self.db.query(Coupon).filter(Coupon.id.in_(batch)).delete(synchronize_session=False)
                self.db.commit()
            except SQLAlchemyError as e:
                error = self._fail("delete_all", e)
                if deleted:
                    self._notify()
                raise error
            deleted += len(batch)

        logger.info(f"{deleted} coupons deleted")
        if deleted:
            self._notify()
        return deleted

    def subscribe(self, callback: Callable[[List[Coupon]], None]) -> Callable[[], None]:
        """
        Pushes the full coupon list now and after every change.

        Returns the unsubscribe function.
        """
        try:
            coupons = self.fetch_all()
            unsubscribe = self.feed.add(callback)
        except Exception as e:
            logger.error(f"Coupon subscription setup failed: {e}")
            return lambda: None

        try:
            callback(coupons)
        except Exception as e:
            logger.warning(f"Coupon subscriber failed: {e}")
        return unsubscribe
