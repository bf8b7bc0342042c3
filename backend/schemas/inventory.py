# backend/schemas/inventory.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from schemas.user import ORMBase, MessageResponse  # noqa: F401


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# Shared attributes for inventory items
class InventoryBase(ORMBase):
    item_name: str = Field(..., min_length=1, alias="itemName")
    description: Optional[str] = None
    quantity: int = Field(..., ge=0)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    supplier: str = Field(..., min_length=1)
    low_stock_alert: int = Field(5, ge=0, alias="lowStockAlert")

    @field_validator("item_name", "description", "category", "supplier", mode="before")
    @classmethod
    def _trim(cls, v):
        return _strip(v)


# Schema for creating a new item
class InventoryCreate(InventoryBase):
    pass


# Schema for partial updates: only supplied fields are written
class InventoryUpdate(ORMBase):
    item_name: Optional[str] = Field(None, min_length=1, alias="itemName")
    description: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    supplier: Optional[str] = Field(None, min_length=1)
    low_stock_alert: Optional[int] = Field(None, ge=0, alias="lowStockAlert")

    @field_validator("item_name", "description", "category", "supplier", mode="before")
    @classmethod
    def _trim(cls, v):
        return _strip(v)


# Full item representation
class InventoryResponse(InventoryBase):
    id: int
    user_id: int = Field(..., alias="userId")
    date_added: Optional[datetime] = Field(None, alias="dateAdded")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class CategoryBreakdown(BaseModel):
    category: str
    quantity: int
    value: float


# Dashboard / analytics summary for one owner
class InventoryStats(ORMBase):
    total_items: int = Field(..., alias="totalItems")
    total_value: float = Field(..., alias="totalValue")
    low_stock_count: int = Field(..., alias="lowStockCount")
    out_of_stock_count: int = Field(..., alias="outOfStockCount")
    categories: List[CategoryBreakdown]
