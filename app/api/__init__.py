"""
API Package
"""

# Import all blueprints for easy access
from app.api.auth import auth_bp
from app.api.users import users_bp
from app.api.complaints import complaints_bp
from app.api.admin import admin_bp

__all__ = [
    'auth_bp',
    'users_bp',
    'complaints_bp',
    'admin_bp',
]
