from couponbot.core.coupon_store import CouponStore
from couponbot.core.database import SessionLocal


def clean_coupons():
    print("🧹 Lösche alle Gutscheine...")
    db = SessionLocal()
    try:
        # Deleted batch by batch, earlier batches stay deleted on error
        deleted = CouponStore(db).delete_all()
        print(f"✅ {deleted} Gutscheine gelöscht.")
    finally:
        db.close()


if __name__ == "__main__":
    clean_coupons()
