"""
Admin read models. Access is gated on the server-side User.is_admin flag.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models import User
from app.schemas.user import (
    AdminUserResponse,
    AdminUsersResponse,
    AdminStatsResponse,
    PreferenceVector,
)
from app.core.auth import get_admin_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=AdminUsersResponse)
def list_users(
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    """All accounts, newest first. Password hashes are never included."""
    users = db.query(User).order_by(User.created_at.desc()).all()
    logger.info("Admin %s listed %d users", admin.id, len(users))
    return AdminUsersResponse(
        users=[
            AdminUserResponse(
                id=u.id,
                email=u.email,
                name=u.name,
                auth_provider=u.auth_provider,
                profile_visibility=u.profile_visibility,
                is_admin=u.is_admin,
                profile=PreferenceVector(**u.preferences),
                created_at=u.created_at,
            )
            for u in users
        ],
        total_count=len(users),
    )


@router.get("/stats", response_model=AdminStatsResponse)
def get_stats(
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    """User count plus PreferenceVector sums across every account."""
    total_users = db.query(func.count(User.id)).scalar() or 0
    sums = db.query(
        func.coalesce(func.sum(User.crime_thriller), 0),
        func.coalesce(func.sum(User.horror), 0),
        func.coalesce(func.sum(User.fantasy), 0),
        func.coalesce(func.sum(User.philosophy), 0),
    ).one()

    return AdminStatsResponse(
        total_users=total_users,
        profile_sums=PreferenceVector(
            crime_thriller=int(sums[0]),
            horror=int(sums[1]),
            fantasy=int(sums[2]),
            philosophy=int(sums[3]),
        ),
    )
