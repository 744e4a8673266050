"""
Script to give a user the admin role
Usage: python scripts/make_admin.py user@example.com
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from extensions import db
from app.models.user import User, UserRole


def make_admin(login):
    """Promote a user, looked up by email or username"""
    app = create_app()

    with app.app_context():
        user = (User.query.filter_by(email=login.lower()).first()
                or User.query.filter_by(username=login).first())

        if not user:
            print(f"User '{login}' not found")
            print("\nAvailable users:")
            for u in User.query.order_by(User.username).all():
                print(f"   - {u.username} <{u.email}> ({u.role.value})")
            return False

        if user.role == UserRole.ADMIN:
            print(f"User '{login}' is already an admin")
            return True

        user.role = UserRole.ADMIN
        db.session.commit()

        print(f"Successfully made '{login}' an admin")
        print(f"   Name: {user.full_name}")
        print(f"   Username: {user.username}")
        print(f"   Active: {user.is_active}")
        return True


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: python scripts/make_admin.py <email-or-username>")
        print("Example: python scripts/make_admin.py officer@municipal.gov")
        sys.exit(1)

    sys.exit(0 if make_admin(sys.argv[1]) else 1)
