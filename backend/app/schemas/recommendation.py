from pydantic import BaseModel
from typing import Optional, List


class RecommendationItem(BaseModel):
    id: str
    title: str
    author: str
    description: str
    reason: str  # Always present: why this book was suggested
    cover_image: Optional[str] = None
    page_count: int = 0
    categories: List[str] = []
    published_date: Optional[str] = None
    isbn: str = ""
    google_id: Optional[str] = None
    genre: Optional[str] = None  # Only set for seed catalog books


class RecommendationPreferences(BaseModel):
    top_categories: List[str]
    top_authors: List[str]
    total_books: int


class RecommendationsResponse(BaseModel):
    recommendations: List[RecommendationItem]
    reason: Optional[str] = None  # "general" for cold-start users
    preferences: Optional[RecommendationPreferences] = None
