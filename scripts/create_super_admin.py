#!/usr/bin/env python3
"""
Script to create the first SUPER_ADMIN staff account interactively.

If a staff account with the email already exists, it is promoted to
SUPER_ADMIN, re-activated and given the new password.

Usage:
    python scripts/create_super_admin.py admin@example.com
    python scripts/create_super_admin.py admin@example.com --first-name Ana --last-name Lima
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from food_delivery.config import load_config
from food_delivery.auth import PasswordHandler, StaffStore, StaffRole, normalize_email


def main():
    parser = argparse.ArgumentParser(description="Create a SUPER_ADMIN staff account")
    parser.add_argument("email", nargs="?", help="Email address")
    parser.add_argument("--first-name", "-f", help="First name")
    parser.add_argument("--last-name", "-l", help="Last name")
    parser.add_argument("--phone", "-p", help="Phone number (e.g., +5511999999999)")
    args = parser.parse_args()

    config = load_config()
    store = StaffStore(
        config.data_dir / "staff.json",
        PasswordHandler(rounds=config.security.bcrypt_rounds)
    )

    # Get email
    email = args.email
    if not email:
        email = input("Email: ").strip()

    normalized = normalize_email(email or "")
    if not normalized:
        print(f"❌ Invalid email address: {email}")
        sys.exit(1)

    # Get password
    password = getpass.getpass("Enter password: ")
    confirm = getpass.getpass("Confirm password: ")

    if password != confirm:
        print("❌ Passwords do not match!")
        sys.exit(1)

    if len(password) < config.security.password_min_length:
        print(f"❌ Password must be at least {config.security.password_min_length} characters!")
        sys.exit(1)

    existing = store.get_by_email(normalized)
    try:
        if existing:
            existing.role = StaffRole.SUPER_ADMIN
            existing.is_active = True
            store.set_password(existing, password)
            staff = store.update_staff(existing)
            print()
            print("✅ Existing account promoted to SUPER_ADMIN and re-activated!")
        else:
            first_name = args.first_name or input("First name: ").strip() or "Super"
            last_name = args.last_name or input("Last name: ").strip() or "Admin"
            staff = store.create_staff(
                email=normalized,
                password=password,
                role=StaffRole.SUPER_ADMIN,
                first_name=first_name,
                last_name=last_name,
                phone=args.phone
            )
            print()
            print("✅ SUPER_ADMIN created successfully!")
    except ValueError as e:
        print(f"❌ Failed to create SUPER_ADMIN: {e}")
        sys.exit(1)

    print(f"   Email: {staff.email}")
    print(f"   Staff ID: {staff.staff_id}")
    print(f"   Name: {staff.first_name} {staff.last_name}")


if __name__ == "__main__":
    main()
