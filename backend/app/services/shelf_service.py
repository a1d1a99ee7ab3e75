"""
Shelf helpers shared by the shelves and books routers.

Default shelves are a fixed list overlaid with live counts; custom shelves are
rows in the shelves table. A custom shelf's members are the entries with
shelf == "custom" and a matching custom_shelf_name.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, Query

from app.models import LibraryEntry, Shelf, ShelfName, DEFAULT_SHELVES
from app.schemas.shelf import ShelfResponse

logger = logging.getLogger(__name__)

DEFAULT_SHELF_META = {
    ShelfName.WANT_TO_READ.value: {"display_name": "Want to Read", "icon": "📚", "color": "#4285f4"},
    ShelfName.CURRENTLY_READING.value: {"display_name": "Currently Reading", "icon": "📖", "color": "#34a853"},
    ShelfName.READ.value: {"display_name": "Read", "icon": "✅", "color": "#fbbc04"},
    ShelfName.FAVORITES.value: {"display_name": "Favorites", "icon": "⭐", "color": "#ea4335"},
    ShelfName.DNF.value: {"display_name": "Did Not Finish", "icon": "⏸️", "color": "#9aa0a6"},
}

DEFAULT_SHELF_NAMES = {s.value for s in DEFAULT_SHELVES}

# Columns clients may sort entry listings by
SORTABLE_FIELDS = {
    "created_at": LibraryEntry.created_at,
    "updated_at": LibraryEntry.updated_at,
    "title": LibraryEntry.title,
    "author": LibraryEntry.author,
    "page_count": LibraryEntry.page_count,
    "reading_progress": LibraryEntry.reading_progress,
    "personal_rating": LibraryEntry.personal_rating,
    "started_reading": LibraryEntry.started_reading,
    "finished_reading": LibraryEntry.finished_reading,
}


def is_reserved_name(name: str) -> bool:
    """Custom shelves may not take a default shelf's name (or 'custom' itself)."""
    normalized = (name or "").strip().lower()
    return normalized in DEFAULT_SHELF_NAMES or normalized == ShelfName.CUSTOM.value


def get_custom_shelf(db: Session, user_id: UUID, name: str) -> Optional[Shelf]:
    return db.query(Shelf).filter(Shelf.user_id == user_id, Shelf.name == name).first()


def custom_shelf_members(db: Session, user_id: UUID, name: str) -> Query:
    return db.query(LibraryEntry).filter(
        LibraryEntry.user_id == user_id,
        LibraryEntry.shelf == ShelfName.CUSTOM.value,
        LibraryEntry.custom_shelf_name == name,
    )


def _default_counts(db: Session, user_id: UUID) -> dict:
    rows = (
        db.query(LibraryEntry.shelf, func.count(LibraryEntry.id))
        .filter(LibraryEntry.user_id == user_id)
        .group_by(LibraryEntry.shelf)
        .all()
    )
    return {shelf: count for shelf, count in rows}


def _custom_counts(db: Session, user_id: UUID) -> dict:
    rows = (
        db.query(LibraryEntry.custom_shelf_name, func.count(LibraryEntry.id))
        .filter(
            LibraryEntry.user_id == user_id,
            LibraryEntry.shelf == ShelfName.CUSTOM.value,
        )
        .group_by(LibraryEntry.custom_shelf_name)
        .all()
    )
    return {name: count for name, count in rows}


def custom_shelf_response(shelf: Shelf, book_count: int = 0) -> ShelfResponse:
    return ShelfResponse(
        id=shelf.id,
        name=shelf.name,
        display_name=shelf.name,
        description=shelf.description or "",
        color=shelf.color,
        icon=shelf.icon,
        is_default=False,
        is_private=shelf.is_private,
        sort_order=shelf.sort_order,
        yearly_goal=shelf.yearly_goal,
        book_count=book_count,
        created_at=shelf.created_at,
        updated_at=shelf.updated_at,
    )


def list_shelves(db: Session, user_id: UUID) -> List[ShelfResponse]:
    """Default shelves in fixed order, then custom shelves by (sort_order, created_at)."""
    default_counts = _default_counts(db, user_id)
    shelves = [
        ShelfResponse(
            name=name.value,
            is_default=True,
            book_count=default_counts.get(name.value, 0),
            **DEFAULT_SHELF_META[name.value],
        )
        for name in DEFAULT_SHELVES
    ]

    custom_counts = _custom_counts(db, user_id)
    custom = (
        db.query(Shelf)
        .filter(Shelf.user_id == user_id)
        .order_by(Shelf.sort_order.asc(), Shelf.created_at.asc())
        .all()
    )
    shelves.extend(custom_shelf_response(s, custom_counts.get(s.name, 0)) for s in custom)
    return shelves


def rename_members(db: Session, user_id: UUID, old_name: str, new_name: str) -> int:
    """Point member entries at the shelf's new name. Caller commits."""
    moved = custom_shelf_members(db, user_id, old_name).update(
        {LibraryEntry.custom_shelf_name: new_name},
        synchronize_session=False,
    )
    logger.debug("Renamed shelf %r -> %r for user %s (%d entries)", old_name, new_name, user_id, moved)
    return moved


def release_members(db: Session, user_id: UUID, name: str) -> int:
    """Move every member of a custom shelf to want-to-read. Safe to repeat. Caller commits."""
    return custom_shelf_members(db, user_id, name).update(
        {
            LibraryEntry.shelf: ShelfName.WANT_TO_READ.value,
            LibraryEntry.custom_shelf_name: "",
        },
        synchronize_session=False,
    )


def delete_shelf(db: Session, shelf: Shelf) -> int:
    """
    Reassign members to want-to-read, then drop the shelf, in one commit.

    Returns the number of entries that were moved.
    """
    try:
        moved = release_members(db, shelf.user_id, shelf.name)
        db.delete(shelf)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted shelf %s for user %s, moved %d entries to want-to-read", shelf.id, shelf.user_id, moved)
    return moved


def query_entries(
    db: Session,
    user_id: UUID,
    shelf: Optional[str] = None,
    custom_shelf_name: Optional[str] = None,
) -> Query:
    """
    Entries of one user, optionally restricted to a shelf.

    A custom filter without a name matches every entry, as does no filter.
    """
    query = db.query(LibraryEntry).filter(LibraryEntry.user_id == user_id)
    if shelf:
        if shelf == ShelfName.CUSTOM.value:
            if custom_shelf_name:
                query = query.filter(
                    LibraryEntry.shelf == ShelfName.CUSTOM.value,
                    LibraryEntry.custom_shelf_name == custom_shelf_name,
                )
        else:
            query = query.filter(LibraryEntry.shelf == shelf)
    return query


def apply_sort(query: Query, sort: str, order: str) -> Query:
    """Order by an allow-listed column. Unknown fields fall back to created_at."""
    column = SORTABLE_FIELDS.get(sort)
    if column is None:
        logger.debug("Ignoring unknown sort field %r", sort)
        column = LibraryEntry.created_at
    ordered = column.asc() if order == "asc" else column.desc()
    return query.order_by(ordered, LibraryEntry.id)
