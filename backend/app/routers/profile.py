from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session
from pathlib import Path
from datetime import datetime
import uuid
import logging

from app.database import get_db
from app.models import User
from app.schemas.user import (
    ProfileResponse,
    ProfileEnvelope,
    ProfileUpdate,
    ProfilePictureResponse,
    PreferenceVector,
)
from app.core.auth import get_path_user
from app.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/profile", tags=["profile"])

PROFILE_PICTURE_SUBDIR = "profiles"
PROFILE_PICTURE_URL_PREFIX = f"/uploads/{PROFILE_PICTURE_SUBDIR}/"
# Stored extension by content type; other image types are stored without one
PICTURE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def _profile_response(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        profile_picture=user.profile_picture,
        bio=user.bio or "",
        location=user.location or "",
        website=user.website or "",
        profile_visibility=user.profile_visibility,
        profile=PreferenceVector(**user.preferences),
        joined_date=user.created_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _pictures_dir() -> Path:
    path = Path(settings.UPLOAD_DIR) / PROFILE_PICTURE_SUBDIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def _remove_picture_file(url: str) -> None:
    """Delete the stored file behind a profile picture URL, if it is still there."""
    path = _pictures_dir() / Path(url).name
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("Profile picture %s already gone", path)


@router.get("/{user_id}", response_model=ProfileEnvelope)
def get_profile(user: User = Depends(get_path_user)):
    return ProfileEnvelope(user=_profile_response(user))


@router.put("/{user_id}", response_model=ProfileEnvelope)
@router.post("/{user_id}", response_model=ProfileEnvelope)
def update_profile(
    update: ProfileUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """
    Partial profile update. A nested `profile` merges into the PreferenceVector
    one dimension at a time.
    """
    data = update.model_dump(exclude_unset=True)
    preferences = data.pop("profile", None)

    for field, value in data.items():
        if value is None:
            continue
        if field == "profile_visibility":
            value = value.value
        setattr(user, field, value)

    for field, value in (preferences or {}).items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return ProfileEnvelope(message="Profile updated successfully", user=_profile_response(user))


@router.post("/{user_id}/picture", response_model=ProfilePictureResponse)
def upload_profile_picture(
    profile_picture: UploadFile = File(...),
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """Store an image (at most MAX_PROFILE_PICTURE_BYTES) and point the profile at it."""
    content_type = (profile_picture.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed",
        )

    contents = profile_picture.file.read(settings.MAX_PROFILE_PICTURE_BYTES + 1)
    if len(contents) > settings.MAX_PROFILE_PICTURE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Profile picture must be 5 MB or smaller",
        )
    if not contents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    suffix = PICTURE_EXTENSIONS.get(content_type.split(";")[0].strip(), "")
    filename = f"{user.id}_{int(datetime.utcnow().timestamp() * 1000)}_{uuid.uuid4().hex[:8]}{suffix}"
    (_pictures_dir() / filename).write_bytes(contents)

    old_picture = user.profile_picture
    user.profile_picture = PROFILE_PICTURE_URL_PREFIX + filename
    db.commit()

    if old_picture:
        _remove_picture_file(old_picture)

    logger.info("Stored profile picture %s for user %s (%d bytes)", filename, user.id, len(contents))
    return ProfilePictureResponse(
        message="Profile picture uploaded successfully",
        profile_picture=user.profile_picture,
    )


@router.delete("/{user_id}/picture", response_model=ProfilePictureResponse)
def delete_profile_picture(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    if user.profile_picture:
        _remove_picture_file(user.profile_picture)
        user.profile_picture = None
        db.commit()

    return ProfilePictureResponse(message="Profile picture deleted successfully", profile_picture=None)
