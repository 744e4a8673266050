"""
Status Update Model
Append-only audit trail of a complaint's status
"""

from extensions import db
from datetime import datetime
from app.models.enums import ComplaintStatus, DepartmentCode, enum_column_type


class StatusUpdate(db.Model):
    """One immutable entry in a complaint's history"""

    __tablename__ = 'status_updates'

    id = db.Column(db.Integer, primary_key=True)
    complaint_id = db.Column(db.Integer, db.ForeignKey('complaints.id'), nullable=False, index=True)
    status = db.Column(enum_column_type(ComplaintStatus), nullable=False)
    comment = db.Column(db.Text)
    updated_by = db.Column(db.String(80), nullable=False)
    department = db.Column(enum_column_type(DepartmentCode))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_dict(self):
        return {
            'id': self.id,
            'complaint_id': self.complaint_id,
            'status': self.status.value,
            'comment': self.comment,
            'updated_by': self.updated_by,
            'department': self.department.value if self.department else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<StatusUpdate {self.id} - Complaint {self.complaint_id} -> {self.status.value}>'
