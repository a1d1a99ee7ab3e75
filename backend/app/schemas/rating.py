from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class RatingCreate(BaseModel):
    book_id: str = Field(min_length=1)
    book_title: str = Field(min_length=1)
    book_author: str = Field(min_length=1)
    book_cover: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    comment: str = Field("", max_length=1000)


class RatingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    user_name: str
    book_id: str
    book_title: str
    book_author: str
    book_cover: Optional[str]
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime


class RatingEnvelope(BaseModel):
    success: bool = True
    message: str
    rating: RatingResponse


class UserRatingItem(BaseModel):
    """A user's own rating, without the user id."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_name: str
    book_id: str
    book_title: str
    book_author: str
    book_cover: Optional[str]
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime


class UserRatingsResponse(BaseModel):
    success: bool = True
    ratings: list[UserRatingItem]


class BookRatingEntry(BaseModel):
    id: UUID
    user_id: UUID
    user_name: str
    rating: int
    comment: str
    created_at: datetime


class BookRatingStatsResponse(BaseModel):
    success: bool = True
    book_id: str
    average_rating: float
    total_ratings: int
    ratings: list[BookRatingEntry]


class RatedBookComment(BaseModel):
    id: UUID
    user_id: UUID
    user_name: str
    rating: int
    text: str
    created_at: datetime


class RatedBookSummary(BaseModel):
    book_id: str
    book_title: str
    book_author: str
    book_cover: Optional[str]
    average_rating: float
    total_ratings: int
    latest_rating: datetime
    comments: list[RatedBookComment]


class RatedBooksResponse(BaseModel):
    success: bool = True
    ratings: list[RatedBookSummary]
