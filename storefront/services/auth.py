"""Authentication orchestration: registration, login, and the TOTP second factor.

The service only decides. It never touches cookies: callers issue a session when
``LoginResult.require_two_factor`` is false or when ``verify_second_factor``
returns, record the pending password login otherwise, and revoke the session on
logout.

Login flow::

    Anonymous --login--> Authenticated                 (second factor off)
    Anonymous --login--> PendingSecondFactor(user_id)  (second factor on)
    PendingSecondFactor --verify_second_factor--> Authenticated
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from storefront.config import settings
from storefront.schemas.user import UserRead
from storefront.services import totp
from storefront.services.credential_store import CredentialStore
from storefront.services.errors import (
    DuplicateCredential,
    InvalidCode,
    InvalidCredentials,
    NoPendingLogin,
    NotConfigured,
    StoreError,
    StoreUnavailable,
    UserNotFound,
)
from storefront.services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

TOTP_WINDOW = 1  # accept one 30s step of clock drift either way


@dataclass
class LoginResult:
    user_id: int
    require_two_factor: bool = False


@dataclass
class Enrollment:
    qr_code_url: str
    secret_key: str


@contextmanager
def _internal_faults(action: str) -> Iterator[None]:
    """Turn store and crypto faults into StoreUnavailable, logging the detail."""
    try:
        yield
    except (StoreError, ValueError) as e:
        logger.error(f"Error {action}: {e}", exc_info=True)
        raise StoreUnavailable() from e


class AuthService:
    def __init__(self, store: CredentialStore, issuer: str | None = None):
        self.store = store
        self.issuer = issuer or settings.totp_issuer

    def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str | None = None,
    ) -> int:
        """Create a user with a disabled second-factor record. Returns the new id."""
        with _internal_faults("registering user"):
            if self.store.find_user_by_username_or_email(username, email):
                raise DuplicateCredential()

            password_hash = hash_password(password)
            secret = totp.generate_secret(username, self.issuer)

            with self.store.atomic():
                user_id = self.store.insert_user(username, email, password_hash, full_name)
                self.store.insert_two_factor(user_id, secret.secret)

        logger.info(f"Registered user {username!r} (id={user_id})")
        return user_id

    def login(self, username: str, password: str) -> LoginResult:
        with _internal_faults("logging in"):
            user = self.store.find_user_by_username(username)
            if user is None or not verify_password(password, user.password_hash):
                logger.warning(f"Failed login for {username!r}")
                raise InvalidCredentials()

            record = self.store.find_two_factor_by_user_id(user.id)

        if record is not None and record.is_enabled:
            logger.info(f"User {user.id} passed first factor, second factor required")
            return LoginResult(user_id=user.id, require_two_factor=True)

        logger.info(f"User {user.id} logged in")
        return LoginResult(user_id=user.id)

    def verify_second_factor(self, user_id: int, code: str, pending_user_id: int | None) -> int:
        """Check a login-time TOTP code. Returns the user id to open a session for.

        ``pending_user_id`` is who passed the password step, if anyone; the code
        is only checked for that same user.
        """
        if pending_user_id is None or pending_user_id != user_id:
            logger.warning(f"2FA code for user {user_id} without a pending password login")
            raise NoPendingLogin()

        with _internal_faults("verifying 2FA code"):
            self._check_code(user_id, code)
        logger.info(f"User {user_id} passed second factor")
        return user_id

    def enroll_second_factor(self, user_id: int) -> Enrollment:
        """Return the QR code and secret for ``user_id``'s authenticator app.

        Re-enrolling before confirmation hands back the same secret.
        """
        with _internal_faults("enrolling 2FA"):
            username = self.store.find_username_by_id(user_id)
            if username is None:
                raise UserNotFound()

            record = self.store.find_two_factor_by_user_id(user_id)
            if record is None:
                secret_key = totp.generate_secret(username, self.issuer).secret
                with self.store.atomic():
                    self.store.insert_two_factor(user_id, secret_key)
            else:
                secret_key = record.secret_key

            otp_uri = totp.get_totp_uri(secret_key, username, self.issuer)
            qr_code_url = totp.render_qr_data_uri(otp_uri)

        return Enrollment(qr_code_url=qr_code_url, secret_key=secret_key)

    def confirm_second_factor(self, user_id: int, code: str):
        """Turn the second factor on once the user proves their app has the secret."""
        with _internal_faults("confirming 2FA"):
            self._check_code(user_id, code)
            with self.store.atomic():
                self.store.enable_two_factor(user_id)
        logger.info(f"Two-factor authentication enabled for user {user_id}")

    def current_user(self, user_id: int | None) -> UserRead | None:
        if user_id is None:
            return None
        with _internal_faults("loading current user"):
            return self.store.find_user_by_id(user_id)

    def logout(self, user_id: int | None):
        if user_id is not None:
            logger.info(f"User {user_id} logged out")

    def _check_code(self, user_id: int, code: str):
        record = self.store.find_two_factor_by_user_id(user_id)
        if record is None:
            raise NotConfigured()
        if not totp.verify_code(record.secret_key, code, window=TOTP_WINDOW):
            logger.warning(f"Invalid 2FA code for user {user_id}")
            raise InvalidCode()
