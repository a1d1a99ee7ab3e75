from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

from app.schemas.book import LibraryEntryResponse


class ShelfCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    color: Optional[str] = None
    icon: Optional[str] = None
    is_private: bool = False
    sort_order: int = 0
    yearly_goal: int = Field(0, ge=0)


class ShelfUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_private: Optional[bool] = None
    sort_order: Optional[int] = None
    yearly_goal: Optional[int] = Field(None, ge=0)


class ShelfResponse(BaseModel):
    """Default shelves have no id and no timestamps."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    name: str
    display_name: str
    description: str = ""
    color: str
    icon: str
    is_default: bool
    is_private: bool = False
    sort_order: int = 0
    yearly_goal: int = 0
    book_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShelvesResponse(BaseModel):
    shelves: list[ShelfResponse]


class ShelfEnvelope(BaseModel):
    message: str
    shelf: ShelfResponse


class ShelfBooksResponse(BaseModel):
    books: list[LibraryEntryResponse]
    total_count: int
    has_more: bool
