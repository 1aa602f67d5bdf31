"""Category API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from freshtrack.api.dependencies import get_category_service, get_current_user
from freshtrack.database import get_db
from freshtrack.models.category import Category
from freshtrack.models.user import User
from freshtrack.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithCountResponse,
)
from freshtrack.services.category_service import (
    CategoryInUseError,
    CategoryService,
    DuplicateCategoryError,
)

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


def get_category(db: Session, category_id: int) -> Category:
    """Get a category by id, or 404."""
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.get("", response_model=list[CategoryWithCountResponse])
def list_categories(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    """List all categories by name, with how many of the caller's items each holds."""
    counts = service.item_counts(current_user.id)
    categories = db.query(Category).order_by(Category.name).all()
    return [
        CategoryWithCountResponse.model_validate(category).model_copy(
            update={"item_count": counts.get(category.id, 0)}
        )
        for category in categories
    ]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category_by_id(
    category_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single category."""
    return get_category(db, category_id)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    """Create a new category."""
    try:
        return service.create(category_data.model_dump())
    except DuplicateCategoryError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    """Update a category."""
    category = get_category(db, category_id)
    changes = {
        field: value
        for field, value in category_data.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    try:
        return service.update(category, changes)
    except DuplicateCategoryError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    """Delete a category. Refused while any item is filed under it."""
    category = get_category(db, category_id)
    try:
        service.delete(category)
    except CategoryInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
