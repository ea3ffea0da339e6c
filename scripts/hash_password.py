#!/usr/bin/env python3
"""
Reset a delegate password by hand.

Usage:
    python scripts/hash_password.py usa_delegate

Prompts twice for the new password and prints the UPDATE statement to
run against the registration database. The hash uses BCRYPT_ROUNDS
from the environment, like the API.
"""

import argparse
import getpass

from tournament_registration.api.auth.jwt_handler import JWTHandler

MIN_PASSWORD_LENGTH = 8


def main():
    parser = argparse.ArgumentParser(description="Generate a bcrypt password hash for a user")
    parser.add_argument("username", nargs="?", default="<username>", help="account the hash is for")
    args = parser.parse_args()

    password = getpass.getpass(f"New password for {args.username}: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match")
        return 1
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return 1

    hashed = JWTHandler().hash_password(password)

    print()
    print(hashed)
    print()
    print(f"UPDATE users SET password_hash = '{hashed}' WHERE username = '{args.username.lower()}';")
    return 0


if __name__ == "__main__":
    exit(main())
