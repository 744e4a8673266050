"""
Users Blueprint
Self-service profile edits
"""

from flask import Blueprint, jsonify, request

from extensions import db
from app.errors import ValidationError, AuthenticationError, NotFoundError
from app.models.user import User
from app.policy import Capability
from app.utils.decorators import requires, current_identity
from app.utils.validators import parse_coordinates, parse_str

users_bp = Blueprint('users', __name__)


def _current_user():
    user = db.session.get(User, current_identity().id)
    if not user:
        raise NotFoundError('User not found')
    return user


@users_bp.route('/me', methods=['PUT'])
@requires(Capability.WRITE_OWN)
def update_profile():
    """Update current user profile"""
    user = _current_user()
    data = request.get_json(silent=True) or {}

    # Flat fields or a nested address object are both accepted
    address = data.get('address') if isinstance(data.get('address'), dict) else {}
    updates = dict(address)
    updates.update({k: v for k, v in data.items() if k != 'address'})

    if 'latitude' in updates or 'longitude' in updates:
        updates['latitude'], updates['longitude'] = parse_coordinates(
            updates.get('latitude', user.latitude), updates.get('longitude', user.longitude)
        )

    for field in User.PROFILE_FIELDS:
        if field in updates:
            value = updates[field]
            if field not in ('latitude', 'longitude'):
                value = parse_str(value, field)
            setattr(user, field, value if value not in ('', None) else None)

    db.session.commit()

    return jsonify({
        'message': 'Profile updated successfully',
        'user': user.to_dict(include_private=True)
    }), 200


@users_bp.route('/me/change-password', methods=['POST'])
@requires(Capability.WRITE_OWN)
def change_password():
    """Change user password"""
    user = _current_user()
    data = request.get_json(silent=True) or {}

    current_password = parse_str(data.get('current_password'), 'current_password', strip=False)
    new_password = parse_str(data.get('new_password'), 'new_password', strip=False)

    if not current_password or not new_password:
        raise ValidationError('Current and new password are required')

    if not user.check_password(current_password):
        raise AuthenticationError('Current password is incorrect')

    if len(new_password) < 6:
        raise ValidationError('Password must be at least 6 characters')

    user.set_password(new_password)
    db.session.commit()

    return jsonify({
        'message': 'Password changed successfully'
    }), 200
