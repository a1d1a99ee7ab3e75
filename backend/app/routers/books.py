from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional, Literal
from uuid import UUID
import random
import logging

from app.database import get_db
from app.models import User, LibraryEntry, ShelfName
from app.schemas.book import (
    LibraryEntryCreate,
    LibraryEntryUpdate,
    LibraryEntryEnvelope,
    LibraryEntryResponse,
    LibraryListResponse,
    MoveRequest,
    ReadingSessionCreate,
    ReadingStatsResponse,
    CatalogBookResponse,
    CatalogSearchResponse,
    SeedBookResponse,
    SeedBrowseResponse,
)
from app.schemas.user import PreferenceVector
from app.schemas.recommendation import RecommendationsResponse
from app.core.auth import get_path_user
from app.services import seed_catalog, shelf_service
from app.services.catalog_gateway import CatalogGateway, CatalogUnavailableError, get_catalog_gateway
from app.services.reading_progress import (
    InvalidShelfError,
    apply_initial_state,
    apply_move,
    add_reading_session,
    recompute_progress,
    compute_reading_stats,
)
from app.services.recommendation_engine import get_personalized_recommendations, get_recommendation_rng

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/books", tags=["books"])

# Entry columns that may be cleared with an explicit null
NULLABLE_ENTRY_FIELDS = {"cover_image", "published_date", "started_reading", "finished_reading", "goal_target_date"}


def _get_entry(db: Session, user: User, book_id: UUID) -> LibraryEntry:
    entry = db.query(LibraryEntry).filter(
        LibraryEntry.id == book_id,
        LibraryEntry.user_id == user.id,
    ).first()
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found",
        )
    return entry


def _require_custom_shelf(db: Session, user: User, name: Optional[str]) -> str:
    """A custom target must name one of the caller's existing custom shelves."""
    name = (name or "").strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Custom shelf name is required",
        )
    if shelf_service.get_custom_shelf(db, user.id, name) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Custom shelf '{name}' does not exist",
        )
    return name


def _move(db: Session, user: User, entry: LibraryEntry, target: ShelfName, custom_shelf_name: Optional[str]) -> None:
    if target == ShelfName.CUSTOM:
        custom_shelf_name = _require_custom_shelf(db, user, custom_shelf_name)
    try:
        apply_move(entry, target, custom_shelf_name)
    except InvalidShelfError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _commit(db: Session, entry: LibraryEntry) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)


@router.get("", response_model=SeedBrowseResponse)
def browse_seed_books(
    genre: Optional[str] = None,
    limit: Optional[int] = None,
    score: Optional[float] = None,
):
    """Public genre browse over the fixed seed catalog."""
    books = seed_catalog.browse(genre=genre, limit=limit, score=score)
    return SeedBrowseResponse(books=[SeedBookResponse(**b) for b in books])


@router.post("", response_model=SeedBrowseResponse)
def browse_seed_books_for_preferences(preferences: PreferenceVector):
    """Seed books for every genre with a positive score; higher scores get more books."""
    books = seed_catalog.browse_for_preferences(preferences.model_dump())
    return SeedBrowseResponse(books=[SeedBookResponse(**b) for b in books])


@router.post("/{user_id}", response_model=LibraryEntryEnvelope, status_code=status.HTTP_201_CREATED)
def add_book(
    entry_data: LibraryEntryCreate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    data = entry_data.model_dump()
    shelf = data.pop("shelf")
    custom_shelf_name = data.pop("custom_shelf_name")

    if shelf == ShelfName.CUSTOM:
        custom_shelf_name = _require_custom_shelf(db, user, custom_shelf_name)
    else:
        custom_shelf_name = ""

    entry = LibraryEntry(
        user_id=user.id,
        shelf=shelf.value,
        custom_shelf_name=custom_shelf_name,
        **data,
    )
    apply_initial_state(entry)

    db.add(entry)
    _commit(db, entry)
    logger.info("User %s added '%s' to %s", user.id, entry.title, entry.shelf)
    return LibraryEntryEnvelope(message="Book added successfully", book=LibraryEntryResponse.model_validate(entry))


@router.put("/{user_id}/{book_id}", response_model=LibraryEntryEnvelope)
def update_book(
    book_id: UUID,
    update: LibraryEntryUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """
    Partial update. Shelf changes follow the move rules; a new current_page
    recomputes progress and may finish the book.
    """
    entry = _get_entry(db, user, book_id)
    data = update.model_dump(exclude_unset=True)
    target_shelf = data.pop("shelf", None)
    custom_shelf_name = data.pop("custom_shelf_name", None)

    for field, value in data.items():
        if value is None and field not in NULLABLE_ENTRY_FIELDS:
            continue
        setattr(entry, field, value)

    if target_shelf is not None:
        _move(db, user, entry, target_shelf, custom_shelf_name)
    elif custom_shelf_name is not None and entry.shelf == ShelfName.CUSTOM.value:
        entry.custom_shelf_name = _require_custom_shelf(db, user, custom_shelf_name)

    if "current_page" in data and data["current_page"] is not None:
        recompute_progress(entry)

    _commit(db, entry)
    return LibraryEntryEnvelope(message="Book updated successfully", book=LibraryEntryResponse.model_validate(entry))


@router.delete("/{user_id}/{book_id}")
def delete_book(
    book_id: UUID,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    entry = _get_entry(db, user, book_id)
    try:
        db.delete(entry)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"message": "Book deleted successfully"}


@router.post("/{user_id}/{book_id}/move", response_model=LibraryEntryEnvelope)
def move_book(
    book_id: UUID,
    move: MoveRequest,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    entry = _get_entry(db, user, book_id)
    _move(db, user, entry, move.target_shelf, move.custom_shelf_name)
    _commit(db, entry)
    return LibraryEntryEnvelope(message="Book moved successfully", book=LibraryEntryResponse.model_validate(entry))


@router.post("/{user_id}/{book_id}/reading-session", response_model=LibraryEntryEnvelope)
def log_reading_session(
    book_id: UUID,
    session_data: ReadingSessionCreate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    entry = _get_entry(db, user, book_id)
    add_reading_session(
        entry,
        pages_read=session_data.pages_read,
        time_spent=session_data.time_spent,
        notes=session_data.notes,
    )
    _commit(db, entry)
    return LibraryEntryEnvelope(message="Reading session added successfully", book=LibraryEntryResponse.model_validate(entry))


@router.get("/{user_id}/search", response_model=CatalogSearchResponse)
def search_catalog(
    q: Optional[str] = None,
    max_results: int = Query(10, ge=1, le=40),
    user: User = Depends(get_path_user),
    gateway: CatalogGateway = Depends(get_catalog_gateway),
):
    """Pass-through search of the external catalog."""
    if not q or not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query is required",
        )

    try:
        books = gateway.search(q.strip(), max_results=max_results)
    except CatalogUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Book search is temporarily unavailable",
        )

    return CatalogSearchResponse(books=[CatalogBookResponse.model_validate(b) for b in books])


@router.get("/{user_id}/recommendations", response_model=RecommendationsResponse)
def get_recommendations(
    max_results: int = Query(10, ge=1, le=40),
    refresh: bool = False,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
    gateway: CatalogGateway = Depends(get_catalog_gateway),
    rng: random.Random = Depends(get_recommendation_rng),
):
    if refresh:
        # Nothing is cached server-side; every call is already fresh
        logger.debug("Recommendation refresh requested by user %s", user.id)

    entries = db.query(LibraryEntry).filter(LibraryEntry.user_id == user.id).all()
    return get_personalized_recommendations(entries, gateway, max_results=max_results, rng=rng)


@router.get("/{user_id}/books", response_model=LibraryListResponse)
def list_books(
    shelf: Optional[ShelfName] = None,
    custom_shelf_name: Optional[str] = None,
    sort: str = "created_at",
    order: Literal["asc", "desc"] = "desc",
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    query = shelf_service.query_entries(db, user.id, shelf.value if shelf else None, custom_shelf_name)
    query = shelf_service.apply_sort(query, sort, order)
    return LibraryListResponse(books=[LibraryEntryResponse.model_validate(e) for e in query.limit(limit).all()])


@router.get("/{user_id}/stats", response_model=ReadingStatsResponse)
def get_reading_stats(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    entries = db.query(LibraryEntry).filter(LibraryEntry.user_id == user.id).all()
    return ReadingStatsResponse(**compute_reading_stats(entries))
