from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Index, Integer, String

from storeadmin.database.base import Base


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String(64), nullable=False, unique=True)

    scope = Column(String(20), nullable=False, default="general")
    target = Column(String, nullable=False, default="")

    price = Column(Float)
    discount = Column(Float, nullable=False)
    min_order_value = Column(Float)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)

    description = Column(String, nullable=False, default="")
    customer_eligibility = Column(String(30), nullable=False, default="all")
    usage_limit = Column(Integer, nullable=False, default=0)
    one_time_use = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_coupon_scope_target", "scope", "target"),
    )


__all__ = ["Coupon"]
