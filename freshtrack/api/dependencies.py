"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from freshtrack.database import get_db
from freshtrack.models.grocery_item import GroceryItem
from freshtrack.models.user import User
from freshtrack.services.auth import decode_access_token
from freshtrack.services.category_service import CategoryService
from freshtrack.services.expiry_service import ExpiryService
from freshtrack.services.grocery_service import GroceryService
from freshtrack.services.notification_service import NotificationService

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication credentials")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid authentication credentials")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None or not user.is_active:
        raise _unauthorized("User not found")

    return user


def get_user_item(db: Session, item_id: int, user: User) -> GroceryItem:
    """Get a grocery item owned by the user, or 404."""
    item = (
        db.query(GroceryItem)
        .filter(GroceryItem.id == item_id, GroceryItem.user_id == user.id)
        .first()
    )
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grocery item not found")
    return item


def get_category_service(
    db: Annotated[Session, Depends(get_db)],
) -> CategoryService:
    """Get category service with dependencies."""
    return CategoryService(db)


def get_grocery_service(
    db: Annotated[Session, Depends(get_db)],
) -> GroceryService:
    """Get grocery service with dependencies."""
    return GroceryService(db)


def get_expiry_service(
    db: Annotated[Session, Depends(get_db)],
) -> ExpiryService:
    """Get expiry service with dependencies."""
    return ExpiryService(db)


def get_notification_service(
    db: Annotated[Session, Depends(get_db)],
) -> NotificationService:
    """Get notification service with dependencies."""
    return NotificationService(db)
