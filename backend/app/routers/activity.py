from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import User, LibraryEntry, Rating, ShelfName
from app.schemas.user import ActivityStats, ActivityResponse
from app.core.auth import get_path_user
from app.services.rating_service import round_rating

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/{user_id}", response_model=ActivityResponse)
def get_activity(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """Shelf counts and rating summary for the activity dashboard."""
    shelf_counts = dict(
        db.query(LibraryEntry.shelf, func.count(LibraryEntry.id))
        .filter(LibraryEntry.user_id == user.id)
        .group_by(LibraryEntry.shelf)
        .all()
    )
    ratings = [r for (r,) in db.query(Rating.rating).filter(Rating.user_id == user.id).all()]
    average = sum(ratings) / len(ratings) if ratings else 0

    return ActivityResponse(
        activity=ActivityStats(
            total_books=sum(shelf_counts.values()),
            completed_books=shelf_counts.get(ShelfName.READ.value, 0),
            currently_reading_books=shelf_counts.get(ShelfName.CURRENTLY_READING.value, 0),
            total_ratings=len(ratings),
            average_rating=round_rating(average),
        )
    )
