"""
User Model
"""

from extensions import db, bcrypt
from datetime import datetime
from enum import Enum
from app.models.enums import enum_column_type


class UserRole(str, Enum):
    """User roles enum"""
    CITIZEN = 'citizen'
    ADMIN = 'admin'


class User(db.Model):
    """User model for authentication and profile"""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(enum_column_type(UserRole), default=UserRole.CITIZEN, nullable=False)

    # Profile
    first_name = db.Column(db.String(50))
    last_name = db.Column(db.String(50))
    phone = db.Column(db.String(20))
    street = db.Column(db.String(200))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip_code = db.Column(db.String(20))
    country = db.Column(db.String(100), default='India')
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)

    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    PROFILE_FIELDS = (
        'first_name', 'last_name', 'phone', 'street', 'city',
        'state', 'zip_code', 'country', 'latitude', 'longitude',
    )

    def __init__(self, email, username, password, **kwargs):
        """Initialize user with hashed password"""
        self.email = email.strip().lower()
        self.username = username.strip()
        self.set_password(password)

        # Handle optional fields
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Verify password against hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def update_last_login(self):
        self.last_login = datetime.utcnow()

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def full_name(self):
        """Return full name, falling back to the username"""
        name = ' '.join(part for part in (self.first_name, self.last_name) if part)
        return name or self.username

    def to_dict(self, include_private=False):
        """Convert user to dictionary"""
        data = {
            'id': self.id,
            'username': self.username,
            'role': self.role.value,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

        if include_private:
            data['email'] = self.email
            data['phone'] = self.phone
            data['address'] = {
                'street': self.street,
                'city': self.city,
                'state': self.state,
                'zip_code': self.zip_code,
                'country': self.country,
            }
            data['location'] = {
                'latitude': self.latitude,
                'longitude': self.longitude,
            }
            data['last_login'] = self.last_login.isoformat() if self.last_login else None

        return data

    def __repr__(self):
        return f'<User {self.username}>'
