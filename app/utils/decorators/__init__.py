"""
Route decorators
"""

from app.utils.decorators.auth import requires, current_identity, resolve_identity

__all__ = [
    'requires',
    'current_identity',
    'resolve_identity',
]
