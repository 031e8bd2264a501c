"""Authentication error taxonomy.

Every error carries a user-safe ``message``. ``status_code`` is the HTTP status
the API layer answers with: logical outcomes (wrong password, bad code) are
reported with 200 and ``success: false``; only internal faults use 5xx.
"""


class StoreError(Exception):
    """Raised by the credential store when the underlying database fails."""


class AuthError(Exception):
    status_code = 200
    default_message = "Authentication failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateCredential(AuthError):
    default_message = "Username or email is already in use"


class InvalidCredentials(AuthError):
    # Same text for unknown user and wrong password
    default_message = "Invalid username or password"


class InvalidCode(AuthError):
    default_message = "Invalid authentication code"


class NotConfigured(AuthError):
    default_message = "Two-factor authentication is not configured for this user"


class UserNotFound(AuthError):
    default_message = "User not found"


class StoreUnavailable(AuthError):
    status_code = 500
    default_message = "An internal error occurred, please try again later"


class NoPendingLogin(AuthError):
    default_message = "Please log in with your password first"
