from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Index, Integer, String

from storeadmin.database.base import Base


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True)

    # Product id, category name or sub-category name depending on target_type.
    target_type = Column(String(20), nullable=False)
    target = Column(String, nullable=False, default="")

    percentage = Column(Float, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)

    description = Column(String, nullable=False, default="")
    apply_to_all_products = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_discount_target", "target_type", "target"),
        Index("idx_discount_dates", "start_date", "end_date"),
    )


__all__ = ["Discount"]
