"""Unit tests for the reading-state rules (no database needed)."""
from datetime import datetime

import pytest

from app.models import LibraryEntry, ShelfName
from app.services.reading_progress import (
    InvalidShelfError,
    compute_progress,
    recompute_progress,
    apply_initial_state,
    apply_move,
    add_reading_session,
    compute_reading_stats,
)

NOW = datetime(2026, 5, 17, 12, 0, 0)


def _entry(**fields) -> LibraryEntry:
    defaults = dict(
        title="Dune",
        author="Frank Herbert",
        page_count=400,
        current_page=0,
        reading_progress=0.0,
        reading_time=0,
        shelf=ShelfName.WANT_TO_READ.value,
        custom_shelf_name="",
    )
    defaults.update(fields)
    return LibraryEntry(**defaults)


def test_compute_progress_caps_at_100():
    assert compute_progress(100, 400) == 25.0
    assert compute_progress(500, 400) == 100.0


def test_compute_progress_unknown_page_count():
    assert compute_progress(50, 0) is None


def test_recompute_progress_finishes_currently_reading_book():
    entry = _entry(shelf=ShelfName.CURRENTLY_READING.value, current_page=400)

    recompute_progress(entry, NOW)

    assert entry.reading_progress == 100.0
    assert entry.shelf == ShelfName.READ.value
    assert entry.finished_reading == NOW


def test_recompute_progress_does_not_move_other_shelves():
    entry = _entry(shelf=ShelfName.FAVORITES.value, current_page=400)

    recompute_progress(entry, NOW)

    assert entry.reading_progress == 100.0
    assert entry.shelf == ShelfName.FAVORITES.value
    assert entry.finished_reading is None


def test_recompute_progress_ignores_books_without_page_count():
    entry = _entry(page_count=0, current_page=50, reading_progress=10.0)

    recompute_progress(entry, NOW)

    assert entry.reading_progress == 10.0


def test_initial_state_for_read_shelf_marks_book_finished():
    entry = _entry(shelf=ShelfName.READ.value)

    apply_initial_state(entry, NOW)

    assert entry.finished_reading == NOW
    assert entry.reading_progress == 100.0
    assert entry.current_page == 400


def test_initial_state_for_currently_reading_stamps_start():
    entry = _entry(shelf=ShelfName.CURRENTLY_READING.value, current_page=100)

    apply_initial_state(entry, NOW)

    assert entry.started_reading == NOW
    assert entry.reading_progress == 25.0
    assert entry.shelf == ShelfName.CURRENTLY_READING.value


def test_move_to_currently_reading_stamps_start_once():
    entry = _entry()
    apply_move(entry, ShelfName.CURRENTLY_READING, now=NOW)
    assert entry.started_reading == NOW

    later = datetime(2026, 6, 1)
    apply_move(entry, ShelfName.CURRENTLY_READING, now=later)
    assert entry.started_reading == NOW


def test_move_to_read_completes_book():
    entry = _entry(shelf=ShelfName.CURRENTLY_READING.value, current_page=120)

    apply_move(entry, ShelfName.READ, now=NOW)

    assert entry.shelf == ShelfName.READ.value
    assert entry.finished_reading == NOW
    assert entry.reading_progress == 100.0
    assert entry.current_page == 400


def test_move_to_custom_requires_name():
    entry = _entry()

    with pytest.raises(InvalidShelfError):
        apply_move(entry, ShelfName.CUSTOM, custom_shelf_name="  ")


def test_move_off_custom_clears_custom_name():
    entry = _entry(shelf=ShelfName.CUSTOM.value, custom_shelf_name="Beach reads")

    apply_move(entry, ShelfName.DNF, now=NOW)

    assert entry.shelf == ShelfName.DNF.value
    assert entry.custom_shelf_name == ""


def test_reading_session_advances_pages_and_time():
    entry = _entry(shelf=ShelfName.CURRENTLY_READING.value, current_page=100, reading_time=30)

    session = add_reading_session(entry, pages_read=50, time_spent=45, notes="good chapter", now=NOW)

    assert session.date == NOW
    assert session.notes == "good chapter"
    assert entry.reading_sessions == [session]
    assert entry.current_page == 150
    assert entry.reading_progress == 37.5
    assert entry.reading_time == 75


def test_reading_session_clamps_to_page_count_and_finishes():
    entry = _entry(shelf=ShelfName.CURRENTLY_READING.value, current_page=390)

    add_reading_session(entry, pages_read=50, now=NOW)

    assert entry.current_page == 400
    assert entry.reading_progress == 100.0
    assert entry.shelf == ShelfName.READ.value
    assert entry.finished_reading == NOW


def test_reading_session_without_pages_keeps_progress():
    entry = _entry(current_page=100, reading_progress=25.0)

    add_reading_session(entry, pages_read=0, time_spent=20, now=NOW)

    assert entry.current_page == 100
    assert entry.reading_progress == 25.0
    assert entry.reading_time == 20


def test_derived_reading_speed_and_days():
    entry = _entry(
        current_page=120,
        reading_time=60,
        started_reading=datetime(2026, 5, 1, 8, 0),
        finished_reading=datetime(2026, 5, 3, 9, 0),
    )

    assert entry.reading_speed == 2.0
    assert entry.days_reading == 3


def test_derived_values_default_to_zero():
    entry = _entry()

    assert entry.reading_speed == 0.0
    assert entry.days_reading == 0


def test_reading_stats():
    entries = [
        _entry(shelf=ShelfName.READ.value, page_count=300, current_page=300, personal_rating=4,
               reading_time=600, finished_reading=datetime(2026, 2, 1)),
        _entry(shelf=ShelfName.READ.value, page_count=200, current_page=200, personal_rating=5,
               finished_reading=datetime(2025, 12, 30)),
        _entry(shelf=ShelfName.CURRENTLY_READING.value, page_count=500, current_page=100, personal_rating=0),
    ]

    stats = compute_reading_stats(entries, now=NOW)

    assert stats["total_books"] == 3
    assert stats["books_read"] == 2
    assert stats["currently_reading"] == 1
    assert stats["total_pages"] == 1000
    assert stats["pages_read"] == 600
    assert stats["total_reading_time"] == 600
    assert stats["average_rating"] == 4.5
    assert stats["books_this_year"] == 1
    assert stats["pages_this_year"] == 300
    assert stats["reading_efficiency"] == 60.0


def test_reading_stats_for_empty_library():
    stats = compute_reading_stats([], now=NOW)

    assert stats["total_books"] == 0
    assert stats["average_rating"] == 0.0
    assert stats["reading_efficiency"] == 0.0
