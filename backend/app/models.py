from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Float, ForeignKey, JSON, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
import math
from datetime import datetime
import enum
import sqlalchemy as sa
from app.database import Base


class ShelfName(str, enum.Enum):
    WANT_TO_READ = "want-to-read"
    CURRENTLY_READING = "currently-reading"
    READ = "read"
    FAVORITES = "favorites"
    DNF = "dnf"
    CUSTOM = "custom"


DEFAULT_SHELVES = [
    ShelfName.WANT_TO_READ,
    ShelfName.CURRENTLY_READING,
    ShelfName.READ,
    ShelfName.FAVORITES,
    ShelfName.DNF,
]


class ProfileVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class AuthProvider(str, enum.Enum):
    PASSWORD = "password"
    GOOGLE = "google"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)  # always stored lower-cased
    password_hash = Column(String, nullable=True)  # null for Google-only accounts
    auth_provider = Column(String, nullable=False, default=AuthProvider.PASSWORD.value)
    name = Column(String, nullable=True)
    bio = Column(String(500), nullable=False, default="")
    location = Column(String, nullable=False, default="")
    website = Column(String, nullable=False, default="")
    profile_picture = Column(String, nullable=True)
    profile_visibility = Column(String, nullable=False, default=ProfileVisibility.PUBLIC.value)
    is_admin = Column(Boolean, nullable=False, default=False)
    # PreferenceVector
    crime_thriller = Column(Integer, nullable=False, default=0)
    horror = Column(Integer, nullable=False, default=0)
    fantasy = Column(Integer, nullable=False, default=0)
    philosophy = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    library_entries = relationship("LibraryEntry", back_populates="user", cascade="all, delete-orphan")
    shelves = relationship("Shelf", back_populates="user", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="user", cascade="all, delete-orphan")

    @property
    def preferences(self) -> dict:
        return {
            "crime_thriller": self.crime_thriller or 0,
            "horror": self.horror or 0,
            "fantasy": self.fantasy or 0,
            "philosophy": self.philosophy or 0,
        }

    @property
    def is_public(self) -> bool:
        return (self.profile_visibility or ProfileVisibility.PUBLIC.value) == ProfileVisibility.PUBLIC.value


class LibraryEntry(Base):
    """A book as tracked inside one user's personal library."""
    __tablename__ = "library_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    google_id = Column(String, nullable=True)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    isbn = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    cover_image = Column(String, nullable=True)
    page_count = Column(Integer, nullable=False, default=0)
    published_date = Column(String, nullable=True)  # raw catalog string ("2005" or "2005-03-01")
    publisher = Column(String, nullable=False, default="")
    language = Column(String, nullable=False, default="English")
    categories = Column(JSON, nullable=False, default=list)
    # Reading state
    shelf = Column(String, nullable=False, default=ShelfName.WANT_TO_READ.value, index=True)
    custom_shelf_name = Column(String, nullable=False, default="")
    current_page = Column(Integer, nullable=False, default=0)
    reading_progress = Column(Float, nullable=False, default=0.0)
    started_reading = Column(DateTime, nullable=True)
    finished_reading = Column(DateTime, nullable=True)
    reading_time = Column(Integer, nullable=False, default=0)  # minutes
    personal_notes = Column(Text, nullable=False, default="")
    personal_rating = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    is_private = Column(Boolean, nullable=False, default=False)
    goal_target_date = Column(DateTime, nullable=True)
    daily_page_goal = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="library_entries")
    reading_sessions = relationship(
        "ReadingSession",
        back_populates="entry",
        order_by="ReadingSession.date",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        sa.Index("idx_library_entries_user_shelf", "user_id", "shelf"),
        sa.Index("idx_library_entries_user_title", "user_id", "title"),
    )

    @property
    def reading_speed(self) -> float:
        """Pages per minute."""
        if self.reading_time and self.current_page:
            return self.current_page / self.reading_time
        return 0.0

    @property
    def days_reading(self) -> int:
        if not self.started_reading:
            return 0
        end = self.finished_reading or datetime.utcnow()
        return math.ceil((end - self.started_reading).total_seconds() / 86400)


class ReadingSession(Base):
    __tablename__ = "reading_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    entry_id = Column(Uuid, ForeignKey("library_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    pages_read = Column(Integer, nullable=False, default=0)
    time_spent = Column(Integer, nullable=False, default=0)  # minutes
    notes = Column(Text, nullable=False, default="")

    entry = relationship("LibraryEntry", back_populates="reading_sessions")


class Shelf(Base):
    """User-defined shelf. Default shelves are not stored."""
    __tablename__ = "shelves"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    color = Column(String, nullable=False, default="#4285f4")
    icon = Column(String, nullable=False, default="📚")
    is_private = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    yearly_goal = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="shelves")

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_shelves_user_name"),
    )


class Rating(Base):
    """
    One rating per (user, external catalog book).

    book_title/book_author/book_cover and user_name are snapshots taken at
    write time; later edits to the source records do not rewrite them.
    """
    __tablename__ = "ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String, nullable=False, default="")
    book_id = Column(String, nullable=False, index=True)
    book_title = Column(String, nullable=False)
    book_author = Column(String, nullable=False)
    book_cover = Column(String, nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(String(1000), nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_ratings_user_book"),
    )
