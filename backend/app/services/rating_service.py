"""
Aggregations over Rating rows.

Both functions take rows the caller already loaded so they stay pure and can
be tested without a database.
"""
from typing import Iterable, List, Dict, Any

from app.models import Rating
from app.schemas.rating import (
    BookRatingEntry,
    BookRatingStatsResponse,
    RatedBookComment,
    RatedBookSummary,
)
from app.utils.numbers import round_half_up

SORT_BY_RATING = "rating"
SORT_BY_RECENT = "recent"


def round_rating(value: float) -> float:
    """Averages are shown with one decimal."""
    return round_half_up(value, 1)


def _by_creation(ratings: Iterable[Rating]) -> List[Rating]:
    return sorted(ratings, key=lambda r: r.created_at)


def book_rating_stats(book_id: str, ratings: Iterable[Rating]) -> BookRatingStatsResponse:
    rows = _by_creation(ratings)
    if not rows:
        return BookRatingStatsResponse(book_id=book_id, average_rating=0, total_ratings=0, ratings=[])

    average = sum(r.rating for r in rows) / len(rows)
    return BookRatingStatsResponse(
        book_id=book_id,
        average_rating=round_rating(average),
        total_ratings=len(rows),
        ratings=[
            BookRatingEntry(
                id=r.id,
                user_id=r.user_id,
                user_name=r.user_name,
                rating=r.rating,
                comment=r.comment or "",
                created_at=r.created_at,
            )
            for r in rows
        ],
    )


def books_with_ratings(ratings: Iterable[Rating], sort_by: str = SORT_BY_RATING, limit: int = 0) -> List[RatedBookSummary]:
    """
    Group ratings per book.

    Snapshot fields come from the earliest rating of each book. Sorting is by
    unrounded average then count ("rating"), or by newest rating ("recent");
    anything else keeps first-seen order. A limit of 0 means no limit.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for r in _by_creation(ratings):
        group = groups.get(r.book_id)
        if group is None:
            group = groups[r.book_id] = {
                "first": r,
                "total": 0,
                "sum": 0,
                "latest": r.created_at,
                "comments": [],
            }
        group["total"] += 1
        group["sum"] += r.rating
        group["latest"] = max(group["latest"], r.created_at)
        if r.comment and r.comment.strip():
            group["comments"].append(
                RatedBookComment(
                    id=r.id,
                    user_id=r.user_id,
                    user_name=r.user_name,
                    rating=r.rating,
                    text=r.comment,
                    created_at=r.created_at,
                )
            )

    ordered = list(groups.items())
    if sort_by == SORT_BY_RATING:
        ordered.sort(key=lambda kv: (kv[1]["sum"] / kv[1]["total"], kv[1]["total"]), reverse=True)
    elif sort_by == SORT_BY_RECENT:
        ordered.sort(key=lambda kv: kv[1]["latest"], reverse=True)

    if limit and limit > 0:
        ordered = ordered[:limit]

    summaries = []
    for book_id, group in ordered:
        first = group["first"]
        summaries.append(
            RatedBookSummary(
                book_id=book_id,
                book_title=first.book_title,
                book_author=first.book_author,
                book_cover=first.book_cover,
                average_rating=round_rating(group["sum"] / group["total"]),
                total_ratings=group["total"],
                latest_rating=group["latest"],
                comments=group["comments"],
            )
        )
    return summaries
