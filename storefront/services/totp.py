"""TOTP (RFC 6238) secrets, codes and provisioning URIs.

Codes are 6 digits over 30-second steps with HMAC-SHA1, which is what Google
Authenticator, Authy and friends expect.
"""

import base64
import io
from dataclasses import dataclass
from datetime import datetime

import pyotp
import qrcode

from storefront.config import settings

SECRET_BYTES = 20  # 160-bit shared secret
SECRET_LENGTH = SECRET_BYTES * 8 // 5  # base32 characters
CODE_DIGITS = 6
TIME_STEP = 30


@dataclass
class TotpSecret:
    secret: str
    otp_uri: str


def _totp(secret: str) -> pyotp.TOTP:
    return pyotp.TOTP(secret, digits=CODE_DIGITS, interval=TIME_STEP)


def generate_secret(label: str, issuer: str | None = None) -> TotpSecret:
    """Create a fresh random secret and its otpauth:// URI for ``label``."""
    secret = pyotp.random_base32(length=SECRET_LENGTH)
    return TotpSecret(secret=secret, otp_uri=get_totp_uri(secret, label, issuer))


def get_totp_uri(secret: str, username: str, issuer: str | None = None) -> str:
    """otpauth://totp/<issuer>:<username>?secret=<secret>&issuer=<issuer>"""
    return _totp(secret).provisioning_uri(
        name=username,
        issuer_name=issuer or settings.totp_issuer,
    )


def current_code(secret: str, for_time: datetime | int | None = None) -> str:
    if for_time is None:
        return _totp(secret).now()
    return _totp(secret).at(for_time)


def verify_code(
    secret: str,
    code: str,
    window: int = 1,
    for_time: datetime | int | None = None,
) -> bool:
    """Check ``code`` against the step at ``for_time`` and ``window`` steps either side.

    Raises ValueError (binascii.Error) if ``secret`` is not valid base32.
    """
    if not secret or not code:
        return False

    code = code.strip().replace(" ", "")
    if len(code) != CODE_DIGITS or not code.isdigit():
        return False

    return _totp(secret).verify(code, for_time=for_time, valid_window=window)


def render_qr_data_uri(uri: str) -> str:
    """Render ``uri`` as a PNG QR code and return it as a data: URI."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
