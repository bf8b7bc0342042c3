# backend/models/inventory.py
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from database import Base

DEFAULT_LOW_STOCK_ALERT = 5

# Model InventoryItem
# A single stock line owned by one user. Item names are unique per owner,
# quantities and prices can never go negative.
class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        UniqueConstraint("user_id", "item_name", name="uq_inventory_owner_item_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    item_name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    category = Column(String, nullable=False, index=True)
    supplier = Column(String, nullable=False)

    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    low_stock_alert = Column(Integer, nullable=False, default=DEFAULT_LOW_STOCK_ALERT)

    date_added = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="items")
