from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String

from storeadmin.core.constants import NEWLY_ADDED
from storeadmin.database.base import Base


class Inventory(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    product_name = Column(String, nullable=False, default="")

    stock = Column(Integer, nullable=False, default=0)
    size_stock = Column(JSON, nullable=False, default=dict)
    color_stock = Column(JSON, nullable=False, default=dict)
    color_size_stock = Column(JSON, nullable=False, default=dict)

    status = Column(String(20), nullable=False, default=NEWLY_ADDED)
    tags = Column(JSON, nullable=False, default=list)

    # Bumped by the ORM on every UPDATE; a stale read fails the write.
    version_id = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("idx_inventory_status", "status"),
    )


__all__ = ["Inventory"]
