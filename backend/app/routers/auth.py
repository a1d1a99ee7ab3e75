from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from app.database import get_db
from app.models import User, AuthProvider
from app.schemas.user import (
    RegisterRequest,
    LoginRequest,
    GoogleAuthRequest,
    AuthResponse,
    UserSummary,
    PreferenceVector,
    PreferenceUpdate,
    PreferenceProfileResponse,
    PreferenceSavedResponse,
)
from app.core.security import verify_password, get_password_hash, create_access_token
from app.core.google_auth import verify_google_id_token
from app.core.auth import get_path_user
from app.core.config import settings
from datetime import timedelta
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _auth_response(user: User, message: str) -> AuthResponse:
    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return AuthResponse(
        message=message,
        user=UserSummary.model_validate(user),
        access_token=access_token,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create a password account and return an access token.

    Emails are stored lower-cased, so "A@x.com" and "a@x.com" collide.
    """
    email = _normalize_email(user_data.email)

    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    new_user = User(
        email=email,
        name=user_data.name,
        password_hash=get_password_hash(user_data.password),
        auth_provider=AuthProvider.PASSWORD.value,
        is_admin=email in settings.admin_emails,
    )

    try:
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    logger.info("Registered user %s", new_user.id)
    return _auth_response(new_user, "User created")


@router.post("/login", response_model=AuthResponse)
def login(user_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == _normalize_email(user_data.email)).first()

    # Same answer for unknown email and wrong password
    if not user or not verify_password(user_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _auth_response(user, "Logged in")


@router.post("/google", response_model=AuthResponse)
def google_sign_in(body: GoogleAuthRequest, db: Session = Depends(get_db)):
    """
    Exchange a verified Google ID token for an EleWand access token.

    First sign-in creates a Google-only account (no password hash).
    """
    claims = verify_google_id_token(body.id_token)
    email = _normalize_email(claims["email"])

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(
            email=email,
            name=claims.get("name") or email,
            password_hash=None,
            auth_provider=AuthProvider.GOOGLE.value,
            is_admin=email in settings.admin_emails,
        )
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError:
            # Concurrent first sign-in created the row
            db.rollback()
            user = db.query(User).filter(User.email == email).first()
            if user is None:
                raise
        logger.info("Created Google account %s", user.id)
    elif user.auth_provider != AuthProvider.GOOGLE.value:
        logger.warning("Google sign-in refused for password account %s", user.id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists. Sign in with your password.",
        )

    return _auth_response(user, "Logged in with Google")


@router.get("/profile/{user_id}", response_model=PreferenceProfileResponse)
def get_preference_profile(user: User = Depends(get_path_user)):
    return PreferenceProfileResponse(
        profile=PreferenceVector(**user.preferences),
        user=UserSummary.model_validate(user),
    )


@router.post("/profile/{user_id}", response_model=PreferenceSavedResponse)
def save_preference_profile(
    update: PreferenceUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """Set any subset of the PreferenceVector; missing dimensions keep their value."""
    for field, value in update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return PreferenceSavedResponse(message="Profile saved", profile=PreferenceVector(**user.preferences))
