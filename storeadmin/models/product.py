from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, String

from storeadmin.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")
    sub_category = Column(String, nullable=False, default="")
    price = Column(Float, nullable=False, default=0)

    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_products_category", "category"),
    )


__all__ = ["Product"]
