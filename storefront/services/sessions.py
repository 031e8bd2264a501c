"""Session cookie issuance and resolution.

The session lives entirely in the client's cookie: a signed token whose subject
is the user id. Nothing is stored server-side, so revocation is just deleting
the cookie.

A password login that still needs a TOTP code gets a separate, short-lived
pending cookie instead. Its token carries ``"stage": "2fa"`` and is never
accepted as a session.
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Request, Response
from jose import JWTError, jwt

from storefront.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

PENDING_STAGE = "2fa"


class SessionIssuer:
    def __init__(self, settings: Settings = default_settings):
        self.cookie_name = settings.session_cookie_name
        self.max_age = settings.session_max_age
        self.pending_cookie_name = settings.pending_cookie_name
        self.pending_max_age = settings.pending_max_age
        self.secure = settings.is_production
        self._secret = settings.session_secret
        self._algorithm = settings.session_algorithm

    def create_token(self, user_id: int, stage: str | None = None, max_age: int | None = None) -> str:
        expire = datetime.now(timezone.utc) + timedelta(seconds=max_age or self.max_age)
        payload = {"sub": str(user_id), "exp": expire}
        if stage is not None:
            payload["stage"] = stage
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode_token(self, token: str, stage: str | None = None) -> int | None:
        """Return the user id in ``token``, or None if it is invalid, expired
        or was minted for a different stage."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            return None
        if payload.get("stage") != stage:
            return None
        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            return None

    def _set(self, response: Response, key: str, value: str, max_age: int):
        response.set_cookie(
            key=key,
            value=value,
            max_age=max_age,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def _delete(self, response: Response, key: str):
        response.delete_cookie(
            key=key,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def issue(self, response: Response, user_id: int):
        self._set(response, self.cookie_name, self.create_token(user_id), self.max_age)
        logger.debug(f"Session issued for user {user_id}")

    def resolve(self, request: Request) -> int | None:
        token = request.cookies.get(self.cookie_name)
        if not token:
            return None
        return self.decode_token(token)

    def revoke(self, response: Response):
        self._delete(response, self.cookie_name)

    def issue_pending(self, response: Response, user_id: int):
        """Remember that ``user_id`` passed the password step."""
        token = self.create_token(user_id, stage=PENDING_STAGE, max_age=self.pending_max_age)
        self._set(response, self.pending_cookie_name, token, self.pending_max_age)

    def resolve_pending(self, request: Request) -> int | None:
        token = request.cookies.get(self.pending_cookie_name)
        if not token:
            return None
        return self.decode_token(token, stage=PENDING_STAGE)

    def clear_pending(self, response: Response):
        self._delete(response, self.pending_cookie_name)
