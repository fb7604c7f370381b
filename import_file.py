import sys
from pathlib import Path

from couponbot.core.coupon_store import CouponStore
from couponbot.core.database import Base, SessionLocal, engine
from couponbot.core.importer import import_file
from couponbot.models.coupon import Coupon  # noqa: F401


def import_from_path(path: str):
    file_path = Path(path)
    print(f"📥 Importiere {file_path.name}...")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        report = import_file(CouponStore(db), file_path.name, file_path.read_bytes())
        print(f"✅ Neu: {report.inserted} | Duplikate: {report.duplicates} | Gesamt: {report.total}")
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("⚠️ Nutzung: python import_file.py <datei.xlsx|.xls|.csv>")
        sys.exit(1)
    import_from_path(sys.argv[1])
