"""
Auth Blueprint
Registration, login and token refresh
"""

from app.api.auth.routes import auth_bp

__all__ = ['auth_bp']
