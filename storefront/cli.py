"""CLI tool for admin operations.

Usage:
    python -m storefront.cli create-admin
    python -m storefront.cli seed-products <products.json>
"""

import getpass
import json
import sys
from pathlib import Path

import qrcode
from pydantic import ValidationError
from sqlmodel import Session

from storefront.database import engine, create_db_and_tables
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.product import ProductCreate
from storefront.services.auth import AuthService
from storefront.services.credential_store import CredentialStore
from storefront.services.errors import AuthError
from storefront.services.totp import get_totp_uri
from storefront.utils.logging import setup_logging


def create_admin():
    """Create an admin user and print their TOTP enrollment details."""
    create_db_and_tables()

    username = input("Username: ").strip()
    email = input("Email: ").strip()
    if not username or not email:
        print("Username and email cannot be empty.")
        sys.exit(1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)

    with Session(engine) as session:
        store = CredentialStore(session)
        auth = AuthService(store)
        try:
            user_id = auth.register(username, email, password)
        except AuthError as e:
            print(e.message)
            sys.exit(1)

        user = session.get(User, user_id)
        user.is_admin = True
        session.add(user)
        session.commit()

        secret = store.find_two_factor_by_user_id(user_id).secret_key

    totp_uri = get_totp_uri(secret, username, auth.issuer)

    print(f"\nAdmin user '{username}' created successfully (id={user_id}).")
    print(f"\nTOTP Secret: {secret}")
    print(f"TOTP URI: {totp_uri}")
    print("\nScan the QR code below, then confirm a code via /api/confirm-2fa to turn 2FA on:")

    qr = qrcode.QRCode(box_size=1, border=1)
    qr.add_data(totp_uri)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def seed_products(path: str):
    """Load a JSON list of products into the catalog."""
    create_db_and_tables()

    try:
        rows = json.loads(Path(path).read_text(encoding="utf-8"))
        products = [ProductCreate(**row) for row in rows]
    except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
        print(f"Could not read products from {path}: {e}")
        sys.exit(1)

    with Session(engine) as session:
        for data in products:
            session.add(Product(**data.model_dump()))
        session.commit()

    print(f"Seeded {len(products)} products.")


def main():
    setup_logging()

    if len(sys.argv) < 2:
        print("Usage: python -m storefront.cli <command>")
        print("Commands: create-admin, seed-products <file>")
        sys.exit(1)

    command = sys.argv[1]
    if command == "create-admin":
        create_admin()
    elif command == "seed-products":
        if len(sys.argv) < 3:
            print("Usage: python -m storefront.cli seed-products <file>")
            sys.exit(1)
        seed_products(sys.argv[2])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
