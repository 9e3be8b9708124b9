#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from leadbook.auth.passwords import hash_password
from leadbook.auth.users import DuplicateEmail, UserStore
from leadbook.config import Settings


def main() -> None:
    settings = Settings.from_env()

    name = input("Name: ").strip()
    email = input("Email: ").strip()
    if not name or not email:
        raise SystemExit("Name and email are required")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if len(pw1) < 8:
        raise SystemExit("Password must be at least 8 characters")

    with UserStore(settings.users_path) as store:
        try:
            user = store.insert(name=name, email=email, password_hash=hash_password(pw1))
        except DuplicateEmail:
            raise SystemExit(f"User already exists: {email}")

    print(f"OK {user.id} -> {settings.users_path}")


if __name__ == "__main__":
    main()
