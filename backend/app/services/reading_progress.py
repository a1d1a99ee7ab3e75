"""
Reading-state rules for library entries.

All functions mutate the entry in place and leave committing to the caller,
so a router can apply several of them inside one transaction.
"""
import logging
from datetime import datetime
from typing import Optional, Iterable, Dict, Any

from app.models import LibraryEntry, ReadingSession, ShelfName
from app.utils.numbers import round_half_up

logger = logging.getLogger(__name__)


class InvalidShelfError(ValueError):
    """A custom shelf target without a name."""
    pass


def compute_progress(current_page: int, page_count: int) -> Optional[float]:
    """Percent read, capped at 100. None when the page count is unknown."""
    if not page_count or page_count <= 0:
        return None
    return min(100.0, (current_page or 0) / page_count * 100)


def apply_auto_transition(entry: LibraryEntry, now: Optional[datetime] = None) -> bool:
    """
    Finishing a book that is being read moves it to 'read'.

    Returns True when the entry moved.
    """
    if entry.shelf == ShelfName.CURRENTLY_READING.value and (entry.reading_progress or 0) >= 100:
        entry.shelf = ShelfName.READ.value
        entry.finished_reading = now or datetime.utcnow()
        logger.debug("Entry %s finished, moved to read", entry.id)
        return True
    return False


def recompute_progress(entry: LibraryEntry, now: Optional[datetime] = None) -> None:
    progress = compute_progress(entry.current_page, entry.page_count)
    if progress is None:
        return
    entry.reading_progress = progress
    apply_auto_transition(entry, now)


def _mark_finished(entry: LibraryEntry, now: datetime) -> None:
    entry.finished_reading = now
    entry.reading_progress = 100.0
    entry.current_page = entry.page_count or 0


def apply_initial_state(entry: LibraryEntry, now: Optional[datetime] = None) -> None:
    """Stamp dates and progress on a freshly added entry according to its shelf."""
    now = now or datetime.utcnow()
    if entry.shelf == ShelfName.CURRENTLY_READING.value:
        entry.started_reading = entry.started_reading or now
    elif entry.shelf == ShelfName.READ.value:
        _mark_finished(entry, now)
        return

    if entry.current_page:
        recompute_progress(entry, now)


def apply_move(
    entry: LibraryEntry,
    target_shelf: ShelfName,
    custom_shelf_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """
    Move an entry to another shelf.

    Entering currently-reading stamps started_reading; entering read stamps
    finished_reading and marks the book fully read. Only custom shelves keep
    a custom_shelf_name.

    :raises InvalidShelfError: target is custom but no name was given.
    """
    now = now or datetime.utcnow()
    target = ShelfName(target_shelf).value
    old_shelf = entry.shelf

    if target == ShelfName.CUSTOM.value:
        name = (custom_shelf_name or "").strip()
        if not name:
            raise InvalidShelfError("Custom shelf name is required")
        entry.custom_shelf_name = name
    else:
        entry.custom_shelf_name = ""

    entry.shelf = target

    if target == ShelfName.CURRENTLY_READING.value and old_shelf != target:
        entry.started_reading = now
    elif target == ShelfName.READ.value and old_shelf != target:
        _mark_finished(entry, now)


def add_reading_session(
    entry: LibraryEntry,
    pages_read: int = 0,
    time_spent: int = 0,
    notes: str = "",
    now: Optional[datetime] = None,
) -> ReadingSession:
    now = now or datetime.utcnow()
    session = ReadingSession(
        date=now,
        pages_read=pages_read or 0,
        time_spent=time_spent or 0,
        notes=notes or "",
    )
    entry.reading_sessions.append(session)

    if pages_read and pages_read > 0:
        advanced = (entry.current_page or 0) + pages_read
        if entry.page_count and entry.page_count > 0:
            advanced = min(entry.page_count, advanced)
        entry.current_page = advanced
        progress = compute_progress(entry.current_page, entry.page_count)
        if progress is not None:
            entry.reading_progress = progress

    if time_spent and time_spent > 0:
        entry.reading_time = (entry.reading_time or 0) + time_spent

    apply_auto_transition(entry, now)
    return session


def compute_reading_stats(entries: Iterable[LibraryEntry], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    stats = {
        "total_books": 0,
        "books_read": 0,
        "currently_reading": 0,
        "total_pages": 0,
        "pages_read": 0,
        "total_reading_time": 0,
        "average_rating": 0.0,
        "books_this_year": 0,
        "pages_this_year": 0,
        "reading_efficiency": 0.0,
    }
    ratings = []

    for entry in entries:
        stats["total_books"] += 1
        if entry.shelf == ShelfName.READ.value:
            stats["books_read"] += 1
        elif entry.shelf == ShelfName.CURRENTLY_READING.value:
            stats["currently_reading"] += 1
        stats["total_pages"] += entry.page_count or 0
        stats["pages_read"] += entry.current_page or 0
        stats["total_reading_time"] += entry.reading_time or 0
        if entry.personal_rating and entry.personal_rating > 0:
            ratings.append(entry.personal_rating)
        if entry.finished_reading and entry.finished_reading.year == now.year:
            stats["books_this_year"] += 1
            stats["pages_this_year"] += entry.page_count or 0

    if ratings:
        stats["average_rating"] = sum(ratings) / len(ratings)
    if stats["pages_read"] > 0 and stats["total_pages"] > 0:
        stats["reading_efficiency"] = round_half_up(stats["pages_read"] / stats["total_pages"] * 100)

    return stats
