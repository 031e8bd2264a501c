"""Credential store: users and second-factor records over a SQLModel session.

Write methods only flush; callers group them with ``atomic()`` so a failure
part-way through rolls the whole unit back.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import or_
from sqlmodel import Session, select

from storefront.models.two_factor import TwoFactorAuth
from storefront.models.user import User
from storefront.schemas.user import UserRead
from storefront.services.errors import DuplicateCredential, StoreError


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreError(f"{action} failed: {e}") from e


class CredentialStore:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Commit on success, roll back on any exception."""
        try:
            yield
            with _store_errors("commit"):
                self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # -- users ---------------------------------------------------------------

    def find_user_by_username_or_email(self, username: str, email: str) -> User | None:
        with _store_errors("user lookup"):
            stmt = select(User).where(or_(User.username == username, User.email == email))
            return self.session.exec(stmt).first()

    def find_user_by_username(self, username: str) -> User | None:
        with _store_errors("user lookup"):
            return self.session.exec(select(User).where(User.username == username)).first()

    def find_user_by_id(self, user_id: int) -> UserRead | None:
        with _store_errors("user lookup"):
            user = self.session.get(User, user_id)
        return UserRead.model_validate(user) if user else None

    def find_username_by_id(self, user_id: int) -> str | None:
        with _store_errors("username lookup"):
            return self.session.exec(select(User.username).where(User.id == user_id)).first()

    def insert_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        full_name: str | None = None,
    ) -> int:
        """Insert a user and return the id the database assigned to it."""
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
        )
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError as e:
            # The unique constraint is authoritative even when the pre-check passed
            raise DuplicateCredential() from e
        except SQLAlchemyError as e:
            raise StoreError(f"user insert failed: {e}") from e
        return user.id

    # -- second factor -------------------------------------------------------

    def find_two_factor_by_user_id(self, user_id: int) -> TwoFactorAuth | None:
        with _store_errors("2FA lookup"):
            stmt = select(TwoFactorAuth).where(TwoFactorAuth.user_id == user_id)
            return self.session.exec(stmt).first()

    def insert_two_factor(self, user_id: int, secret_key: str) -> TwoFactorAuth:
        record = TwoFactorAuth(user_id=user_id, secret_key=secret_key, is_enabled=False)
        self.session.add(record)
        with _store_errors("2FA insert"):
            self.session.flush()
        return record

    def enable_two_factor(self, user_id: int):
        record = self.find_two_factor_by_user_id(user_id)
        if record is None or record.is_enabled:
            return
        record.is_enabled = True
        self.session.add(record)
        with _store_errors("2FA update"):
            self.session.flush()
