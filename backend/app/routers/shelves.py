from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, Literal
from uuid import UUID
import logging

from app.database import get_db
from app.models import User, Shelf, ShelfName
from app.schemas.book import LibraryEntryResponse
from app.schemas.shelf import (
    ShelfCreate,
    ShelfUpdate,
    ShelvesResponse,
    ShelfEnvelope,
    ShelfBooksResponse,
)
from app.core.auth import get_path_user
from app.services import shelf_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/shelves", tags=["shelves"])


def _get_shelf(db: Session, user: User, shelf_id: UUID) -> Shelf:
    shelf = db.query(Shelf).filter(Shelf.id == shelf_id, Shelf.user_id == user.id).first()
    if not shelf:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shelf not found",
        )
    return shelf


def _shelf_name_conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Shelf name already exists",
    )


def _check_name(db: Session, user: User, name: str) -> str:
    name = name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Shelf name is required",
        )
    if shelf_service.is_reserved_name(name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"'{name}' is a default shelf name",
        )
    if shelf_service.get_custom_shelf(db, user.id, name) is not None:
        raise _shelf_name_conflict()
    return name


@router.get("/{user_id}", response_model=ShelvesResponse)
def list_shelves(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    return ShelvesResponse(shelves=shelf_service.list_shelves(db, user.id))


@router.post("/{user_id}", response_model=ShelfEnvelope, status_code=status.HTTP_201_CREATED)
def create_shelf(
    shelf_data: ShelfCreate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    name = _check_name(db, user, shelf_data.name)
    data = shelf_data.model_dump(exclude={"name"})
    # Blank color/icon fall back to the column defaults
    for key in ("color", "icon"):
        if not data.get(key):
            data.pop(key)

    shelf = Shelf(user_id=user.id, name=name, **data)
    try:
        db.add(shelf)
        db.commit()
        db.refresh(shelf)
    except IntegrityError:
        db.rollback()
        raise _shelf_name_conflict()

    logger.info("User %s created shelf '%s'", user.id, shelf.name)
    return ShelfEnvelope(
        message="Shelf created successfully",
        shelf=shelf_service.custom_shelf_response(shelf),
    )


@router.put("/{user_id}/{shelf_id}", response_model=ShelfEnvelope)
def update_shelf(
    shelf_id: UUID,
    update: ShelfUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """Partial update. A rename carries the shelf's books along."""
    shelf = _get_shelf(db, user, shelf_id)
    data = update.model_dump(exclude_unset=True)
    new_name = data.pop("name", None)

    try:
        if new_name is not None and new_name.strip() != shelf.name:
            new_name = _check_name(db, user, new_name)
            shelf_service.rename_members(db, user.id, shelf.name, new_name)
            shelf.name = new_name

        for field, value in data.items():
            if value is None or (field in ("color", "icon") and not value):
                continue
            setattr(shelf, field, value)

        db.commit()
    except IntegrityError:
        db.rollback()
        raise _shelf_name_conflict()

    db.refresh(shelf)
    count = shelf_service.custom_shelf_members(db, user.id, shelf.name).count()
    return ShelfEnvelope(
        message="Shelf updated successfully",
        shelf=shelf_service.custom_shelf_response(shelf, count),
    )


@router.delete("/{user_id}/{shelf_id}")
def delete_shelf(
    shelf_id: UUID,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """Books on the shelf go back to want-to-read before the shelf is removed."""
    shelf = _get_shelf(db, user, shelf_id)
    moved = shelf_service.delete_shelf(db, shelf)
    return {"message": "Shelf deleted successfully", "moved_books": moved}


@router.get("/{user_id}/books/{shelf_name}", response_model=ShelfBooksResponse)
def get_shelf_books(
    shelf_name: str,
    custom_shelf_name: Optional[str] = None,
    sort: str = "created_at",
    order: Literal["asc", "desc"] = "desc",
    limit: int = Query(50, ge=1, le=500),
    skip: int = Query(0, ge=0),
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """
    Page through one shelf.

    shelf_name is a default shelf, "custom" together with custom_shelf_name,
    or the name of a custom shelf.
    """
    if shelf_name == ShelfName.CUSTOM.value:
        if not custom_shelf_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Custom shelf name required",
            )
        query = shelf_service.custom_shelf_members(db, user.id, custom_shelf_name)
    elif shelf_name in shelf_service.DEFAULT_SHELF_NAMES:
        query = shelf_service.query_entries(db, user.id, shelf_name)
    elif shelf_service.get_custom_shelf(db, user.id, shelf_name) is not None:
        query = shelf_service.custom_shelf_members(db, user.id, shelf_name)
    else:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shelf not found",
        )

    total_count = query.count()
    books = shelf_service.apply_sort(query, sort, order).offset(skip).limit(limit).all()
    return ShelfBooksResponse(
        books=[LibraryEntryResponse.model_validate(b) for b in books],
        total_count=total_count,
        has_more=total_count > skip + len(books),
    )
