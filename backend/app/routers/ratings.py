from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Literal
from uuid import UUID
from datetime import datetime
import logging

from app.database import get_db
from app.models import User, Rating
from app.schemas.rating import (
    RatingCreate,
    RatingResponse,
    RatingEnvelope,
    UserRatingItem,
    UserRatingsResponse,
    BookRatingStatsResponse,
    RatedBooksResponse,
)
from app.core.auth import get_current_user
from app.services.rating_service import book_rating_stats, books_with_ratings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ratings", tags=["ratings"])

# Shown in public rating payloads when the rater has no display name
ANONYMOUS_RATER = "Anonymous"


@router.get("", response_model=RatedBooksResponse)
def list_rated_books(
    sort: Literal["rating", "recent"] = "rating",
    limit: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Every rated book with its aggregate score and non-empty comments. limit=0 means all."""
    ratings = db.query(Rating).all()
    return RatedBooksResponse(ratings=books_with_ratings(ratings, sort_by=sort, limit=limit))


@router.get("/book/{book_id}", response_model=BookRatingStatsResponse)
def get_book_ratings(book_id: str, db: Session = Depends(get_db)):
    ratings = db.query(Rating).filter(Rating.book_id == book_id).all()
    return book_rating_stats(book_id, ratings)


@router.get("/user/{user_id}", response_model=UserRatingsResponse)
def get_user_ratings(user_id: UUID, db: Session = Depends(get_db)):
    ratings = (
        db.query(Rating)
        .filter(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc())
        .all()
    )
    return UserRatingsResponse(ratings=[UserRatingItem.model_validate(r) for r in ratings])


@router.post("", response_model=RatingEnvelope)
def upsert_rating(
    rating_data: RatingCreate,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create or overwrite the caller's rating for a book.

    The rater always comes from the access token. Only public profiles may
    rate. Each write refreshes the title/author/cover and user name snapshots.
    """
    if not user.is_public:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only users with public profiles can submit ratings",
        )

    snapshot = {
        "user_name": (user.name or "").strip() or ANONYMOUS_RATER,
        "book_title": rating_data.book_title,
        "book_author": rating_data.book_author,
        "book_cover": rating_data.book_cover or None,
        "rating": rating_data.rating,
        "comment": rating_data.comment or "",
    }

    existing = db.query(Rating).filter(
        Rating.user_id == user.id,
        Rating.book_id == rating_data.book_id,
    ).first()

    if existing:
        for field, value in snapshot.items():
            setattr(existing, field, value)
        existing.updated_at = datetime.utcnow()
        rating = existing
        message = "Rating updated successfully"
    else:
        rating = Rating(user_id=user.id, book_id=rating_data.book_id, **snapshot)
        db.add(rating)
        message = "Rating created successfully"
        response.status_code = status.HTTP_201_CREATED

    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same (user, book) first
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already rated this book",
        )

    db.refresh(rating)
    logger.info("User %s rated book %s: %d", user.id, rating.book_id, rating.rating)
    return RatingEnvelope(message=message, rating=RatingResponse.model_validate(rating))


@router.delete("/{rating_id}")
def delete_rating(
    rating_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Rating not found",
        )

    if rating.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own ratings",
        )

    try:
        db.delete(rating)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return {"success": True, "message": "Rating deleted successfully"}
