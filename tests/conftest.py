"""Pytest configuration: in-memory SQLite store, isolated live feed per test."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from couponbot.core.coupon_store import CouponFeed, CouponStore, NewCoupon
from couponbot.core.database import Base
from couponbot.models.coupon import Coupon  # noqa: F401


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def feed():
    return CouponFeed()


@pytest.fixture
def store(db, feed):
    return CouponStore(db, feed=feed, batch_size=500)


@pytest.fixture
def make_coupon(store):
    """Create a stored coupon and return its id."""
    def _make(code="SUMMER24", valid_from="01/01/2024", valid_to="31/12/2024", **extra):
        coupon_id = store.create(NewCoupon(code=code, valid_from=valid_from, valid_to=valid_to))
        if extra:
            from couponbot.core.coupon_store import CouponUpdate
            store.update(coupon_id, CouponUpdate(**extra))
        return coupon_id
    return _make
