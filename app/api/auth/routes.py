"""
Authentication Routes
"""

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity
)
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from extensions import db, limiter
from app.errors import ValidationError, AuthenticationError, NotFoundError
from app.models.user import User, UserRole
from app.policy import Capability
from app.utils.decorators import requires, current_identity
from app.utils.validators import require_fields, parse_coordinates, parse_str

auth_bp = Blueprint('auth', __name__)


def issue_tokens(user):
    """Access and refresh tokens for a user, subject is the string user id"""
    return {
        'access_token': create_access_token(identity=str(user.id), additional_claims={'role': user.role.value}),
        'refresh_token': create_refresh_token(identity=str(user.id)),
    }


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per hour")
def register():
    """Register a new citizen"""
    data = request.get_json(silent=True) or {}

    require_fields(data, ['username', 'email', 'password'])

    username = parse_str(data['username'], 'username')
    email = parse_str(data['email'], 'email').lower()
    password = parse_str(data['password'], 'password', strip=False)

    if len(password) < 6:
        raise ValidationError('Password must be at least 6 characters')

    if User.query.filter_by(email=email).first():
        raise ValidationError('Email already registered', status_code=409)

    if User.query.filter_by(username=username).first():
        raise ValidationError('Username already taken', status_code=409)

    address = data.get('address') or {}
    if not isinstance(address, dict):
        raise ValidationError('address must be an object')

    location = {}
    if data.get('latitude') is not None and data.get('longitude') is not None:
        location['latitude'], location['longitude'] = parse_coordinates(data['latitude'], data['longitude'])

    user = User(
        email=email,
        username=username,
        password=password,
        role=UserRole.CITIZEN,
        first_name=parse_str(data.get('first_name'), 'first_name'),
        last_name=parse_str(data.get('last_name'), 'last_name'),
        phone=parse_str(data.get('phone'), 'phone'),
        street=parse_str(address.get('street'), 'street'),
        city=parse_str(address.get('city'), 'city'),
        state=parse_str(address.get('state'), 'state'),
        zip_code=parse_str(address.get('zip_code'), 'zip_code'),
        **location
    )
    country = parse_str(address.get('country'), 'country')
    if country:
        user.country = country

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError('Username or email already registered', status_code=409)

    current_app.logger.info(f'User {user.username!r} registered')

    return jsonify({
        'message': 'User registered successfully',
        'user': user.to_dict(include_private=True),
        **issue_tokens(user)
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("50 per hour")
def login():
    """Login with username or email"""
    data = request.get_json(silent=True) or {}

    login_name = parse_str(data.get('username') or data.get('email'), 'username') or ''
    password = parse_str(data.get('password'), 'password', strip=False)

    if not login_name or not password:
        raise ValidationError('Username and password are required')

    user = User.query.filter(
        or_(User.username == login_name, User.email == login_name.lower())
    ).first()

    if not user or not user.check_password(password):
        raise AuthenticationError('Invalid credentials')

    if not user.is_active:
        raise AuthenticationError('Account is deactivated', status_code=403)

    user.update_last_login()
    db.session.commit()

    return jsonify({
        'message': 'Login successful',
        'user': user.to_dict(include_private=True),
        **issue_tokens(user)
    }), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """Refresh access token"""
    user = db.session.get(User, int(get_jwt_identity()))

    if not user or not user.is_active:
        raise AuthenticationError('User not found or inactive', status_code=403)

    return jsonify({
        'access_token': create_access_token(identity=str(user.id), additional_claims={'role': user.role.value})
    }), 200


@auth_bp.route('/me', methods=['GET'])
@requires(Capability.READ_OWN)
def get_current_user():
    """Get current authenticated user"""
    user = db.session.get(User, current_identity().id)
    if not user:
        raise NotFoundError('User not found')

    return jsonify({
        'user': user.to_dict(include_private=True)
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@requires(Capability.READ_OWN)
def logout():
    """Logout user (client should delete token)"""
    return jsonify({
        'message': 'Logout successful'
    }), 200
