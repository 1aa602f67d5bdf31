"""Grocery item API endpoints."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from freshtrack.api.dependencies import (
    get_current_user,
    get_expiry_service,
    get_grocery_service,
    get_user_item,
)
from freshtrack.database import get_db
from freshtrack.models.category import Category
from freshtrack.models.enums import ItemStatus
from freshtrack.models.grocery_item import GroceryItem
from freshtrack.models.user import User
from freshtrack.schemas.grocery import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    CategoryStat,
    GroceryItemCreate,
    GroceryItemResponse,
    GroceryItemUpdate,
    GroceryListResponse,
    GroceryStatsResponse,
    Pagination,
    QuantityChange,
    StatusStat,
)
from freshtrack.services.expiry_service import ExpiryService
from freshtrack.services.grocery_service import (
    GroceryService,
    InsufficientQuantityError,
    InvalidCategoryError,
)

router = APIRouter(prefix="/api/v1/groceries", tags=["groceries"])

SORT_COLUMNS = {
    "name": GroceryItem.name,
    "expiry_date": GroceryItem.expiry_date,
    "purchase_date": GroceryItem.purchase_date,
    "quantity": GroceryItem.quantity,
    "price": GroceryItem.price,
    "created_at": GroceryItem.created_at,
}


def _respond(item: GroceryItem, service: GroceryService) -> GroceryItemResponse:
    return GroceryItemResponse.from_item(item, service.today(), service.policy)


@router.get("", response_model=GroceryListResponse)
def list_groceries(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
    category_id: int | None = None,
    item_status: Annotated[ItemStatus | None, Query(alias="status")] = None,
    search: str | None = None,
    sort_by: Annotated[str, Query(pattern="^(" + "|".join(SORT_COLUMNS) + ")$")] = "expiry_date",
    sort_order: Annotated[str, Query(pattern="^(asc|desc)$")] = "asc",
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """List the caller's items with filters, sorting and pagination."""
    query = db.query(GroceryItem).filter(GroceryItem.user_id == current_user.id)
    if category_id is not None:
        query = query.filter(GroceryItem.category_id == category_id)
    if item_status is not None:
        query = query.filter(GroceryItem.status == item_status.value)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            GroceryItem.name.ilike(pattern)
            | GroceryItem.brand.ilike(pattern)
            | GroceryItem.barcode.ilike(pattern)
        )

    total = query.count()
    column = SORT_COLUMNS[sort_by]
    ordering = column.desc() if sort_order == "desc" else column.asc()
    items = (
        query.order_by(ordering.nullslast(), GroceryItem.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return GroceryListResponse(
        items=[_respond(item, service) for item in items],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if total else 0,
        ),
    )


@router.get("/low-stock", response_model=list[GroceryItemResponse])
def list_low_stock(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
    expiry: Annotated[ExpiryService, Depends(get_expiry_service)],
):
    """In-stock items at or below their low-stock threshold, lowest quantity first."""
    items = expiry.low_stock(current_user.id)
    return [_respond(item, service) for item in items]


@router.get("/stats", response_model=GroceryStatsResponse)
def grocery_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Count and total value of the caller's items per status and per category."""
    status_rows = (
        db.query(
            GroceryItem.status,
            func.count(GroceryItem.id),
            func.coalesce(func.sum(GroceryItem.quantity * GroceryItem.price), 0),
        )
        .filter(GroceryItem.user_id == current_user.id)
        .group_by(GroceryItem.status)
        .order_by(GroceryItem.status)
        .all()
    )
    category_rows = (
        db.query(Category.id, Category.name, func.count(GroceryItem.id))
        .join(GroceryItem, GroceryItem.category_id == Category.id)
        .filter(GroceryItem.user_id == current_user.id)
        .group_by(Category.id, Category.name)
        .order_by(func.count(GroceryItem.id).desc(), Category.name)
        .all()
    )

    return GroceryStatsResponse(
        status_stats=[
            StatusStat(status=item_status, count=count, total_value=float(value))
            for item_status, count, value in status_rows
        ],
        category_stats=[
            CategoryStat(category_id=category_id, name=name, count=count)
            for category_id, name, count in category_rows
        ],
    )


@router.get("/barcode/{code}", response_model=GroceryItemResponse)
def get_grocery_by_barcode(
    code: str,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Look up one of the caller's items by its exact barcode."""
    item = service.find_by_barcode(current_user.id, code)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found with this barcode",
        )
    return _respond(item, service)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_groceries(
    request: BulkDeleteRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Delete several of the caller's items at once."""
    count = service.delete_items(current_user.id, request.ids)
    return BulkDeleteResponse(
        deleted_count=count, message=f"{count} grocery items deleted successfully"
    )


@router.post("", response_model=GroceryItemResponse, status_code=status.HTTP_201_CREATED)
def create_grocery(
    item_data: GroceryItemCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Add an item to the caller's inventory."""
    try:
        item = service.create_item(current_user.id, item_data.model_dump())
    except InvalidCategoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _respond(item, service)


@router.get("/{item_id}", response_model=GroceryItemResponse)
def get_grocery(
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Get a single item."""
    return _respond(get_user_item(db, item_id, current_user), service)


@router.put("/{item_id}", response_model=GroceryItemResponse)
def update_grocery(
    item_id: int,
    item_data: GroceryItemUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Update an item. Status is recomputed from quantity and expiry date."""
    item = get_user_item(db, item_id, current_user)
    try:
        item = service.update_item(item, item_data.model_dump(exclude_unset=True))
    except InvalidCategoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _respond(item, service)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_grocery(
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete an item."""
    item = get_user_item(db, item_id, current_user)
    db.delete(item)
    db.commit()


@router.post("/{item_id}/consume", response_model=GroceryItemResponse)
def consume_grocery(
    item_id: int,
    change: QuantityChange,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Use up part of an item."""
    item = get_user_item(db, item_id, current_user)
    try:
        item = service.consume(item, change.amount)
    except InsufficientQuantityError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _respond(item, service)


@router.post("/{item_id}/restock", response_model=GroceryItemResponse)
def restock_grocery(
    item_id: int,
    change: QuantityChange,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[GroceryService, Depends(get_grocery_service)],
):
    """Add to an item's quantity."""
    item = get_user_item(db, item_id, current_user)
    return _respond(service.restock(item, change.amount), service)
