"""
Users Blueprint
Self-service profile and password changes
"""

from app.api.users.routes import users_bp

__all__ = ['users_bp']
