from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from couponbot.core.database import Base


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, index=True)  # Always upper case, e.g. "TRH0FI"
    type = Column(String, default="")
    used = Column(Boolean, default=False)
    used_by = Column(String, default="")
    used_date = Column(String, default="")  # Long form, e.g. "June 15, 2024"
    note = Column(String, default="")
    valid_from = Column(String, default="")  # dd/mm/yyyy
    valid_to = Column(String, default="")  # dd/mm/yyyy, inclusive
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Coupon {self.code} used={self.used}>"
