"""Authentication API: registration, login, two-factor and session endpoints.

Logical failures (duplicate user, wrong password, bad code) come back as
``200 {"success": false, "message": ...}`` via the AuthError handler in main.
"""

from fastapi import APIRouter, Depends, Request, Response

from storefront.api.deps import (
    get_auth_service,
    get_current_user_id,
    get_session_issuer,
    require_user_id,
)
from storefront.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    EnrollmentResponse,
    LoginRequest,
    RegisterRequest,
    TwoFactorCodeRequest,
)
from storefront.services.auth import AuthService
from storefront.services.sessions import SessionIssuer

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    user_id = auth.register(body.username, body.email, body.password, body.full_name)
    return AuthResponse(success=True, message="User registered successfully", user_id=user_id)


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
def login(
    body: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionIssuer = Depends(get_session_issuer),
):
    result = auth.login(body.username, body.password)
    if result.require_two_factor:
        sessions.issue_pending(response, result.user_id)
        return AuthResponse(
            success=True,
            message="Please enter your two-factor authentication code",
            user_id=result.user_id,
            require_two_factor=True,
        )

    sessions.issue(response, result.user_id)
    return AuthResponse(success=True, message="Logged in successfully", user_id=result.user_id)


@router.post("/verify-2fa", response_model=AuthResponse, response_model_exclude_none=True)
def verify_two_factor(
    body: TwoFactorCodeRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionIssuer = Depends(get_session_issuer),
):
    pending_user_id = sessions.resolve_pending(request)
    user_id = auth.verify_second_factor(body.user_id, body.code, pending_user_id)
    sessions.clear_pending(response)
    sessions.issue(response, user_id)
    return AuthResponse(success=True, message="Verified successfully")


@router.post("/enable-2fa", response_model=EnrollmentResponse)
def enable_two_factor(
    user_id: int = Depends(require_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    enrollment = auth.enroll_second_factor(user_id)
    return EnrollmentResponse(
        success=True,
        message="Two-factor authentication key created",
        qr_code_url=enrollment.qr_code_url,
        secret_key=enrollment.secret_key,
    )


@router.post("/confirm-2fa", response_model=AuthResponse, response_model_exclude_none=True)
def confirm_two_factor(body: TwoFactorCodeRequest, auth: AuthService = Depends(get_auth_service)):
    auth.confirm_second_factor(body.user_id, body.code)
    return AuthResponse(success=True, message="Two-factor authentication enabled")


@router.get("/me", response_model=CurrentUserResponse)
def current_user(
    user_id: int | None = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    return CurrentUserResponse(user=auth.current_user(user_id))


@router.post("/logout", response_model=AuthResponse, response_model_exclude_none=True)
def logout(
    response: Response,
    user_id: int | None = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionIssuer = Depends(get_session_issuer),
):
    auth.logout(user_id)
    sessions.revoke(response)
    return AuthResponse(success=True, message="Logged out")
