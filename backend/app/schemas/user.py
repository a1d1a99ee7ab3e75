from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.models import ProfileVisibility


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Full name is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not any(ch.isdigit() for ch in v):
            raise ValueError("Password must contain a number")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class GoogleAuthRequest(BaseModel):
    id_token: str = Field(min_length=1)


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: Optional[str] = None
    is_admin: bool = False


class AuthResponse(BaseModel):
    message: str
    user: UserSummary
    access_token: str
    token_type: str = "bearer"


class PreferenceVector(BaseModel):
    crime_thriller: int = Field(0, ge=0)
    horror: int = Field(0, ge=0)
    fantasy: int = Field(0, ge=0)
    philosophy: int = Field(0, ge=0)


class PreferenceUpdate(BaseModel):
    """Partial PreferenceVector; unset dimensions keep their stored value."""
    crime_thriller: Optional[int] = Field(None, ge=0)
    horror: Optional[int] = Field(None, ge=0)
    fantasy: Optional[int] = Field(None, ge=0)
    philosophy: Optional[int] = Field(None, ge=0)


class PreferenceProfileResponse(BaseModel):
    profile: PreferenceVector
    user: UserSummary


class PreferenceSavedResponse(BaseModel):
    message: str
    profile: PreferenceVector


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: Optional[str]
    email: str
    profile_picture: Optional[str]
    bio: str
    location: str
    website: str
    profile_visibility: ProfileVisibility
    profile: PreferenceVector
    joined_date: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ProfileEnvelope(BaseModel):
    message: Optional[str] = None
    user: ProfileResponse


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = None
    website: Optional[str] = None
    profile_visibility: Optional[ProfileVisibility] = None
    profile: Optional[PreferenceUpdate] = None


class ProfilePictureResponse(BaseModel):
    message: str
    profile_picture: Optional[str]


class ActivityStats(BaseModel):
    total_books: int
    completed_books: int
    currently_reading_books: int
    total_ratings: int
    average_rating: float


class ActivityResponse(BaseModel):
    success: bool = True
    activity: ActivityStats


class AdminUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: Optional[str]
    auth_provider: str
    profile_visibility: ProfileVisibility
    is_admin: bool
    profile: PreferenceVector
    created_at: Optional[datetime]


class AdminUsersResponse(BaseModel):
    users: list[AdminUserResponse]
    total_count: int


class AdminStatsResponse(BaseModel):
    total_users: int
    profile_sums: PreferenceVector
