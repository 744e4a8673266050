"""
Officer Model
"""

from extensions import db
from datetime import datetime


officer_assignments = db.Table(
    'officer_assignments',
    db.Column('officer_id', db.Integer, db.ForeignKey('officers.id'), primary_key=True),
    db.Column('complaint_id', db.Integer, db.ForeignKey('complaints.id'), primary_key=True),
)


class Officer(db.Model):
    """Department staff member"""

    __tablename__ = 'officers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(20))
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assigned_complaints = db.relationship('Complaint', secondary=officer_assignments,
                                          backref=db.backref('officers', lazy='dynamic'))

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
        if self.email:
            self.email = self.email.strip().lower()

    def to_dict(self, include_department=True):
        data = {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'department_id': self.department_id,
            'assigned_complaints': [c.id for c in self.assigned_complaints],
            'is_active': self.is_active,
        }

        if include_department and self.department:
            data['department'] = {'id': self.department.id, 'name': self.department.name}

        return data

    def __repr__(self):
        return f'<Officer {self.name}>'
