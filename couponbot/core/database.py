from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from couponbot.core.config import DATABASE_URL

engine = create_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# Session per request
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
