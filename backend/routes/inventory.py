# backend/routes/inventory.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.inventory import InventoryItem
from utils.tokenJWT import get_current_user_id
from utils.audit import write_log, client_ip
import schemas.inventory as inventory_schemas

router = APIRouter(prefix="/inventory", tags=["Inventory"])

logger = logging.getLogger(__name__)

ITEM_NOT_FOUND = "Item not found"
DUPLICATE_NAME = "Item with this name already exists"

# Wire name (and column name) -> sortable column
SORTABLE = {
    "itemName": InventoryItem.item_name,
    "quantity": InventoryItem.quantity,
    "price": InventoryItem.price,
    "category": InventoryItem.category,
    "supplier": InventoryItem.supplier,
    "lowStockAlert": InventoryItem.low_stock_alert,
    "dateAdded": InventoryItem.date_added,
    "createdAt": InventoryItem.created_at,
    "updatedAt": InventoryItem.updated_at,
}
SORTABLE.update({col.key: col for col in list(SORTABLE.values())})

# Columns that may not be cleared through an update
REQUIRED_FIELDS = {"item_name", "quantity", "price", "category", "supplier", "low_stock_alert"}


# ---- HELPERS ----
def _owned(db: Session, user_id: int):
    return db.query(InventoryItem).filter(InventoryItem.user_id == user_id)


def _get_owned_or_404(db: Session, user_id: int, item_id: int) -> InventoryItem:
    item = _owned(db, user_id).filter(InventoryItem.id == item_id).first()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ITEM_NOT_FOUND)
    return item


def _name_taken(db: Session, user_id: int, item_name: str, exclude_id: Optional[int] = None) -> bool:
    query = _owned(db, user_id).filter(InventoryItem.item_name == item_name)
    if exclude_id is not None:
        query = query.filter(InventoryItem.id != exclude_id)
    return query.first() is not None


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        # Unique (user_id, item_name) can still trip under concurrent writes
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_NAME)


# =========================
# LIST
# =========================
@router.get("", response_model=List[inventory_schemas.InventoryResponse])
def list_items(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return _owned(db, user_id).order_by(InventoryItem.id.asc()).all()


# =========================
# SEARCH
# =========================
@router.get("/search", response_model=List[inventory_schemas.InventoryResponse])
def search_items(
    query: Optional[str] = Query(None, description="Matches item name or description"),
    category: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    q = _owned(db, user_id)

    if query:
        # "%" and "_" in the term match literally
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        like = f"%{escaped}%"
        q = q.filter(or_(
            InventoryItem.item_name.ilike(like, escape="\\"),
            InventoryItem.description.ilike(like, escape="\\"),
        ))
    if category:
        q = q.filter(InventoryItem.category == category)

    if sort_by:
        col = SORTABLE.get(sort_by)
        if col is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Cannot sort by '{sort_by}'")
        q = q.order_by(col.desc() if sort_order.lower() == "desc" else col.asc())
    else:
        q = q.order_by(InventoryItem.id.asc())

    return q.all()


# =========================
# LOW STOCK
# =========================
@router.get("/low-stock", response_model=List[inventory_schemas.InventoryResponse])
def low_stock_items(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return (
        _owned(db, user_id)
        .filter(InventoryItem.quantity <= InventoryItem.low_stock_alert)
        .order_by(InventoryItem.quantity.asc(), InventoryItem.id.asc())
        .all()
    )


# =========================
# DASHBOARD / ANALYTICS
# =========================
@router.get("/stats", response_model=inventory_schemas.InventoryStats)
def inventory_stats(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    value_expr = InventoryItem.price * InventoryItem.quantity

    total_items, total_value = (
        db.query(func.count(InventoryItem.id), func.coalesce(func.sum(value_expr), 0.0))
        .filter(InventoryItem.user_id == user_id)
        .one()
    )
    low_stock_count = _owned(db, user_id).filter(
        InventoryItem.quantity <= InventoryItem.low_stock_alert
    ).count()
    out_of_stock_count = _owned(db, user_id).filter(InventoryItem.quantity == 0).count()

    # Quantity and value per category, most valuable first
    rows = (
        db.query(
            InventoryItem.category.label("category"),
            func.sum(InventoryItem.quantity).label("quantity"),
            func.sum(value_expr).label("value"),
        )
        .filter(InventoryItem.user_id == user_id)
        .group_by(InventoryItem.category)
        .order_by(func.sum(value_expr).desc(), InventoryItem.category.asc())
        .all()
    )
    categories = [
        inventory_schemas.CategoryBreakdown(category=r.category, quantity=int(r.quantity or 0), value=float(r.value or 0.0))
        for r in rows
    ]

    return inventory_schemas.InventoryStats(
        total_items=total_items,
        total_value=float(total_value or 0.0),
        low_stock_count=low_stock_count,
        out_of_stock_count=out_of_stock_count,
        categories=categories,
    )


# =========================
# SINGLE ITEM
# =========================
@router.get("/{item_id}", response_model=inventory_schemas.InventoryResponse)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return _get_owned_or_404(db, user_id, item_id)


# =========================
# CREATE
# =========================
@router.post("", response_model=inventory_schemas.InventoryResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: inventory_schemas.InventoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    if _name_taken(db, user_id, payload.item_name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_NAME)

    item = InventoryItem(user_id=user_id, **payload.model_dump())
    db.add(item)
    _commit_or_conflict(db)
    db.refresh(item)

    write_log(db, user_id=user_id, action="ITEM_CREATE", resource="inventory",
              ip=client_ip(request), meta={"id": item.id, "item_name": item.item_name})
    return item


# =========================
# UPDATE (partial)
# =========================
@router.put("/{item_id}", response_model=inventory_schemas.InventoryResponse)
def update_item(
    item_id: int,
    payload: inventory_schemas.InventoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    item = _get_owned_or_404(db, user_id, item_id)
    changes = payload.model_dump(exclude_unset=True)

    for key, value in changes.items():
        if value is None and key in REQUIRED_FIELDS:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be empty")

    new_name = changes.get("item_name")
    if new_name is not None and new_name != item.item_name and _name_taken(db, user_id, new_name, exclude_id=item.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_NAME)

    for key, value in changes.items():
        setattr(item, key, value)

    _commit_or_conflict(db)
    db.refresh(item)

    write_log(db, user_id=user_id, action="ITEM_UPDATE", resource="inventory",
              ip=client_ip(request), meta={"id": item.id, "fields": sorted(changes)})
    return item


# =========================
# DELETE
# =========================
@router.delete("/{item_id}", response_model=inventory_schemas.MessageResponse)
def delete_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    item = _get_owned_or_404(db, user_id, item_id)
    iid = item.id
    db.delete(item)
    db.commit()

    write_log(db, user_id=user_id, action="ITEM_DELETE", resource="inventory",
              ip=client_ip(request), meta={"id": iid})
    return {"message": "Item deleted successfully"}
