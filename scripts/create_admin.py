#!/usr/bin/env python3
"""
Script to create (or promote) the platform administrator.

Admins cannot sign up through the API, so the first one is created here.

Usage:
    python scripts/create_admin.py admin@example.com "Admin Name" <password>
"""
import os
import sys

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from connecto.core.security import hash_password
from connecto.db.database import SessionLocal, engine, Base
from connecto.models.user import User, UserRole, VerificationStatus
# Register the remaining tables before create_all
from connecto.models import aura, group, message  # noqa: F401


def create_admin(email, full_name, password):
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            print(f"User {email} already exists, promoting to admin")
            user.role = UserRole.ADMIN
            user.status = VerificationStatus.VERIFIED
        else:
            user = User(
                full_name=full_name,
                email=email,
                password=hash_password(password),
                role=UserRole.ADMIN,
                status=VerificationStatus.VERIFIED,
            )
            db.add(user)
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)

    admin = create_admin(*sys.argv[1:])
    print(f"Admin ready: id={admin.id} email={admin.email}")
