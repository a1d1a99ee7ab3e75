from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.models import ShelfName


class LibraryEntryCreate(BaseModel):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    google_id: Optional[str] = None
    isbn: str = ""
    description: str = ""
    cover_image: Optional[str] = None
    page_count: int = Field(0, ge=0)
    published_date: Optional[str] = None
    publisher: str = ""
    language: str = "English"
    categories: list[str] = Field(default_factory=list)
    shelf: ShelfName = ShelfName.WANT_TO_READ
    custom_shelf_name: str = ""
    current_page: int = Field(0, ge=0)
    personal_rating: int = Field(0, ge=0, le=5)
    personal_notes: str = ""
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False
    goal_target_date: Optional[datetime] = None
    daily_page_goal: int = Field(0, ge=0)


class LibraryEntryUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    isbn: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    page_count: Optional[int] = Field(None, ge=0)
    published_date: Optional[str] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    categories: Optional[list[str]] = None
    shelf: Optional[ShelfName] = None
    custom_shelf_name: Optional[str] = None
    current_page: Optional[int] = Field(None, ge=0)
    started_reading: Optional[datetime] = None
    finished_reading: Optional[datetime] = None
    reading_time: Optional[int] = Field(None, ge=0)
    personal_rating: Optional[int] = Field(None, ge=0, le=5)
    personal_notes: Optional[str] = None
    tags: Optional[list[str]] = None
    is_private: Optional[bool] = None
    goal_target_date: Optional[datetime] = None
    daily_page_goal: Optional[int] = Field(None, ge=0)


class MoveRequest(BaseModel):
    target_shelf: ShelfName
    custom_shelf_name: Optional[str] = None


class ReadingSessionCreate(BaseModel):
    pages_read: int = Field(0, ge=0)
    time_spent: int = Field(0, ge=0)
    notes: str = ""


class ReadingSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    date: datetime
    pages_read: int
    time_spent: int
    notes: str


class LibraryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    google_id: Optional[str]
    title: str
    author: str
    isbn: str
    description: str
    cover_image: Optional[str]
    page_count: int
    published_date: Optional[str]
    publisher: str
    language: str
    categories: list[str]
    shelf: ShelfName
    custom_shelf_name: str
    current_page: int
    reading_progress: float
    started_reading: Optional[datetime]
    finished_reading: Optional[datetime]
    reading_time: int
    reading_sessions: list[ReadingSessionResponse]
    personal_rating: int
    personal_notes: str
    tags: list[str]
    is_private: bool
    goal_target_date: Optional[datetime]
    daily_page_goal: int
    reading_speed: float
    days_reading: int
    created_at: datetime
    updated_at: datetime


class LibraryEntryEnvelope(BaseModel):
    message: str
    book: LibraryEntryResponse


class LibraryListResponse(BaseModel):
    books: list[LibraryEntryResponse]


class ReadingStatsResponse(BaseModel):
    total_books: int
    books_read: int
    currently_reading: int
    total_pages: int
    pages_read: int
    total_reading_time: int
    average_rating: float
    books_this_year: int
    pages_this_year: int
    reading_efficiency: float


class CatalogBookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    google_id: str
    title: str
    author: str
    description: str
    page_count: int
    published_date: Optional[str]
    publisher: str
    language: str
    categories: list[str]
    cover_image: Optional[str]
    isbn: str


class CatalogSearchResponse(BaseModel):
    books: list[CatalogBookResponse]


class SeedBookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    author: str
    genre: str
    description: str


class SeedBrowseResponse(BaseModel):
    books: list[SeedBookResponse]
