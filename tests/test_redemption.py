"""
Tests for the redemption state machine and its store interaction.
"""

import threading
from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from couponbot.core.coupon_store import CouponFeed, CouponStore, NewCoupon
from couponbot.core.database import Base
from couponbot.core.errors import EmptyCodeError
from couponbot.core.i18n import translate
from couponbot.core.redemption import (
    RedemptionStatus,
    evaluate_coupon,
    normalize_code,
    redeem_coupon,
)

MID_2024 = date(2024, 6, 15)


def snapshot(**overrides):
    values = dict(id=1, code="SUMMER24", used=False, used_by="", used_date="",
                  valid_from="01/01/2024", valid_to="31/12/2024")
    values.update(overrides)
    return SimpleNamespace(**values)


class SpyStore(CouponStore):
    """Counts write calls."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.mark_used_calls = []

    def mark_used(self, coupon_id, used_by, used_date, note=""):
        self.mark_used_calls.append((coupon_id, used_by, used_date, note))
        return super().mark_used(coupon_id, used_by, used_date, note)


@pytest.fixture
def spy(db, feed):
    return SpyStore(db, feed=feed)


class TestNormalizeCode:

    def test_trim_and_upper(self):
        assert normalize_code("  summer24 ") == "SUMMER24"

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_empty(self, code):
        with pytest.raises(EmptyCodeError):
            normalize_code(code)


class TestEvaluateCoupon:
    """The pure decision, no store involved."""

    def test_redeemable_inside_window(self):
        assert evaluate_coupon(snapshot(), MID_2024) is None

    def test_first_and_last_day_are_inclusive(self):
        assert evaluate_coupon(snapshot(), date(2024, 1, 1)) is None
        assert evaluate_coupon(snapshot(), date(2024, 12, 31)) is None

    def test_used_wins_over_dates(self):
        outcome = evaluate_coupon(snapshot(used=True, used_by="Alice", valid_to=""), MID_2024)
        assert outcome.status is RedemptionStatus.ALREADY_USED

    def test_missing_window(self):
        outcome = evaluate_coupon(snapshot(valid_from=""), MID_2024)
        assert outcome.status is RedemptionStatus.NO_VALIDITY_WINDOW
        assert outcome.message == translate("redeem.no_window")

    def test_not_yet_valid(self):
        outcome = evaluate_coupon(snapshot(valid_from="1/7/2024"), MID_2024)
        assert outcome.status is RedemptionStatus.NOT_YET_VALID
        assert outcome.valid_from == "01/07/2024"
        assert "01/07/2024" in outcome.message

    def test_expired(self):
        outcome = evaluate_coupon(snapshot(), date(2025, 1, 1))
        assert outcome.status is RedemptionStatus.EXPIRED
        assert outcome.valid_to == "31/12/2024"
        assert "31/12/2024" in outcome.message

    def test_iso_window(self):
        assert evaluate_coupon(snapshot(valid_from="2024-01-01", valid_to="2024-12-31"), MID_2024) is None


class TestRedeemCoupon:
    """Full flow against the SQLite store."""

    def test_redeems_once(self, spy, make_coupon):
        make_coupon()
        outcome = redeem_coupon(spy, "summer24", today=MID_2024, used_by="Bob")

        assert outcome.status is RedemptionStatus.REDEEMED
        assert outcome.success
        assert len(spy.mark_used_calls) == 1
        coupon = spy.fetch_by_code("SUMMER24")
        assert coupon.used is True
        assert coupon.used_by == "Bob"
        assert coupon.used_date == "June 15, 2024"
        assert coupon.note == ""

    def test_unknown_actor_by_default(self, store, make_coupon):
        make_coupon()
        redeem_coupon(store, "SUMMER24", today=MID_2024)
        assert store.fetch_by_code("SUMMER24").used_by == translate("unknown")

    def test_expired_does_not_write(self, spy, make_coupon):
        make_coupon()
        outcome = redeem_coupon(spy, "SUMMER24", today=date(2025, 1, 1))

        assert outcome.status is RedemptionStatus.EXPIRED
        assert "31/12/2024" in outcome.message
        assert spy.mark_used_calls == []
        assert spy.fetch_by_code("SUMMER24").used is False

    def test_not_found_does_not_write(self, spy):
        outcome = redeem_coupon(spy, "NOPE", today=MID_2024)
        assert outcome.status is RedemptionStatus.NOT_FOUND
        assert spy.mark_used_calls == []

    def test_already_used_reports_who_and_when(self, store, make_coupon):
        make_coupon(used=True, used_by="Alice", used_date="15 June 2024")
        outcome = redeem_coupon(store, "SUMMER24", today=MID_2024)

        assert outcome.status is RedemptionStatus.ALREADY_USED
        assert outcome.used_by == "Alice"
        assert outcome.used_date == "15/06/2024"
        assert "Alice" in outcome.message

    def test_second_redeem_is_already_used(self, store, make_coupon):
        make_coupon()
        first = redeem_coupon(store, "SUMMER24", today=MID_2024, used_by="Bob")
        second = redeem_coupon(store, "SUMMER24", today=MID_2024, used_by="Eve")

        assert first.status is RedemptionStatus.REDEEMED
        assert second.status is RedemptionStatus.ALREADY_USED
        assert second.used_by == "Bob"

    def test_empty_code_is_error_outcome(self, spy):
        outcome = redeem_coupon(spy, "   ", today=MID_2024)
        assert outcome.status is RedemptionStatus.ERROR
        assert outcome.message == translate("redeem.empty_code")

    def test_invalid_stored_date_is_error_outcome(self, store, make_coupon):
        make_coupon(valid_from="31/02/2024")
        outcome = redeem_coupon(store, "SUMMER24", today=MID_2024)
        assert outcome.status is RedemptionStatus.ERROR
        assert "31/02/2024" in outcome.message

    def test_missing_id_is_error_outcome(self, db, feed):
        class NoIdStore(CouponStore):
            def fetch_by_code(self, code):
                return snapshot(id=None)

        outcome = redeem_coupon(NoIdStore(db, feed=feed), "SUMMER24", today=MID_2024)
        assert outcome.status is RedemptionStatus.ERROR
        assert outcome.message == translate("store.id_missing")

    def test_store_failure_is_error_outcome(self, db, feed):
        class BrokenStore(CouponStore):
            def fetch_by_code(self, code):
                raise RuntimeError("connection reset")

        outcome = redeem_coupon(BrokenStore(db, feed=feed), "SUMMER24", today=MID_2024)
        assert outcome.status is RedemptionStatus.ERROR
        assert outcome.message == "connection reset"


class TestConcurrentRedemption:
    """Exactly one of two competing redemptions may win."""

    def test_stale_read_loses(self, db, feed, store, make_coupon):
        coupon_id = make_coupon()
        stale = snapshot(id=coupon_id)

        class StaleStore(CouponStore):
            def fetch_by_code(self, code):
                return stale

        first = redeem_coupon(store, "SUMMER24", today=MID_2024, used_by="Alice")
        second = redeem_coupon(StaleStore(db, feed=feed), "SUMMER24", today=MID_2024, used_by="Mallory")

        assert first.status is RedemptionStatus.REDEEMED
        assert second.status is RedemptionStatus.ALREADY_USED
        assert second.used_by == "Alice"
        assert store.fetch_by_id(coupon_id).used_by == "Alice"

    def test_parallel_threads(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"timeout": 30, "check_same_thread": False})
        Base.metadata.create_all(bind=engine)
        Session = sessionmaker(bind=engine)
        feed = CouponFeed()

        setup = Session()
        coupon_id = CouponStore(setup, feed=feed).create(
            NewCoupon(code="RACE", valid_from="01/01/2024", valid_to="31/12/2024"))
        setup.close()

        barrier = threading.Barrier(2)
        results = []

        def attempt(name):
            session = Session()
            try:
                barrier.wait()
                results.append(redeem_coupon(CouponStore(session, feed=feed), "RACE",
                                             today=MID_2024, used_by=name))
            finally:
                session.close()

        threads = [threading.Thread(target=attempt, args=(name,)) for name in ("A", "B")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        engine.dispose()

        statuses = sorted(outcome.status.value for outcome in results)
        assert statuses == ["already_used", "redeemed"]
        assert coupon_id


class TestMessageQuoting:
    """Redeemer names come from Telegram profiles."""

    def test_already_used_name_is_quoted(self, store, make_coupon):
        make_coupon()
        redeem_coupon(store, "SUMMER24", today=MID_2024, used_by="Tom <3 & Co (42)")
        outcome = redeem_coupon(store, "SUMMER24", today=MID_2024, used_by="Eve")

        assert outcome.status is RedemptionStatus.ALREADY_USED
        assert outcome.used_by == "Tom <3 & Co (42)"
        assert "Tom &lt;3 &amp; Co (42)" in outcome.message
        assert "<3" not in outcome.message

    def test_store_failure_text_is_quoted(self, db, feed):
        class BrokenStore(CouponStore):
            def fetch_by_code(self, code):
                raise RuntimeError("bad <row>")

        outcome = redeem_coupon(BrokenStore(db, feed=feed), "SUMMER24", today=MID_2024)
        assert outcome.message == "bad &lt;row&gt;"
