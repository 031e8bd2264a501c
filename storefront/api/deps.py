"""Shared API dependencies."""

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from storefront.database import get_session
from storefront.services.auth import AuthService
from storefront.services.credential_store import CredentialStore
from storefront.services.sessions import SessionIssuer

_session_issuer = SessionIssuer()


def get_session_issuer() -> SessionIssuer:
    return _session_issuer


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(CredentialStore(session))


def get_current_user_id(
    request: Request,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> int | None:
    """User id from the session cookie, or None when there is no valid session."""
    return issuer.resolve(request)


def require_user_id(user_id: int | None = Depends(get_current_user_id)) -> int:
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in",
        )
    return user_id
