"""
Google sign-in: verify a Google ID token against Google's published signing keys.
"""
from typing import Dict, Any

import requests
from fastapi import HTTPException, status
from jose import jwt, JWTError

from app.core.config import settings

import logging


logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def _fetch_google_jwks() -> Dict[str, Any]:
    try:
        resp = requests.get(settings.GOOGLE_CERTS_URL, timeout=settings.CATALOG_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Could not fetch Google signing keys: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is temporarily unavailable",
        )


def verify_google_id_token(id_token: str) -> Dict[str, Any]:
    """
    Validate a Google ID token and return its claims.

    Checks the RS256 signature, audience (GOOGLE_CLIENT_ID), issuer and that
    Google has verified the email address.
    """
    if not settings.GOOGLE_CLIENT_ID:
        logger.error("GOOGLE_CLIENT_ID not configured - Google sign-in disabled")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is not configured",
        )

    jwks = _fetch_google_jwks()

    try:
        payload = jwt.decode(
            id_token,
            jwks,
            algorithms=["RS256"],
            audience=settings.GOOGLE_CLIENT_ID,
            options={"verify_at_hash": False},
        )
    except JWTError as e:
        logger.warning(f"Google token validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google token",
        )

    if payload.get("iss") not in GOOGLE_ISSUERS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google token issuer",
        )

    if not payload.get("email"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Google token does not contain email",
        )

    # Older tokens carry the claim as the string "true"
    if payload.get("email_verified") not in (True, "true"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google account email is not verified",
        )

    return payload
