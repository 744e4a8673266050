"""
Department Model
"""

from extensions import db
from datetime import datetime


class Department(db.Model):
    """Administrative unit handling a set of complaint categories"""

    __tablename__ = 'departments'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    categories = db.Column(db.JSON, default=list, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    officers = db.relationship('Officer', backref='department', lazy='dynamic')

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_dict(self, include_officers=False):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'categories': list(self.categories or []),
            'is_active': self.is_active,
        }

        if include_officers:
            data['officers'] = [
                officer.to_dict(include_department=False)
                for officer in self.officers.filter_by(is_active=True)
            ]

        return data

    def __repr__(self):
        return f'<Department {self.name}>'
