"""
Complaint Model
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from extensions import db
from app.models.enums import (
    ComplaintCategory,
    ComplaintStatus,
    ComplaintPriority,
    DepartmentCode,
    VoteType,
    enum_column_type,
)


@dataclass(frozen=True)
class RegisteredOwner:
    """Complaint filed by a logged-in citizen"""
    user_id: int


@dataclass(frozen=True)
class AnonymousOwner:
    """Complaint filed without an account, with optional contact details"""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


Owner = Union[RegisteredOwner, AnonymousOwner]


class Complaint(db.Model):
    """Citizen-reported municipal issue"""

    __tablename__ = 'complaints'
    __table_args__ = (
        db.CheckConstraint(
            'citizen_id IS NULL OR (anonymous_name IS NULL AND '
            'anonymous_email IS NULL AND anonymous_phone IS NULL)',
            name='single_owner'
        ),
        db.CheckConstraint(
            'feedback_rating IS NULL OR (feedback_rating >= 1 AND feedback_rating <= 5)',
            name='feedback_rating'
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(enum_column_type(ComplaintCategory), nullable=False, index=True)

    # Location
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    address = db.Column(db.String(255))
    image_url = db.Column(db.String(255))

    # Workflow
    status = db.Column(enum_column_type(ComplaintStatus), default=ComplaintStatus.PENDING,
                       nullable=False, index=True)
    priority = db.Column(enum_column_type(ComplaintPriority), default=ComplaintPriority.MEDIUM,
                         nullable=False)
    assigned_department = db.Column(enum_column_type(DepartmentCode), default=DepartmentCode.GENERAL,
                                    nullable=False, index=True)
    assigned_to = db.Column(db.String(120))
    escalated = db.Column(db.Boolean, default=False, nullable=False)
    deadline = db.Column(db.DateTime)

    # Owner; read and written through the `owner` property only
    citizen_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    anonymous_name = db.Column(db.String(120))
    anonymous_email = db.Column(db.String(120))
    anonymous_phone = db.Column(db.String(20))

    vote_count = db.Column(db.Integer, default=0, nullable=False)

    # Feedback (write-once)
    feedback_rating = db.Column(db.Integer)
    feedback_comment = db.Column(db.Text)
    feedback_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    feedback_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    citizen = db.relationship('User', foreign_keys=[citizen_id],
                              backref=db.backref('complaints', lazy='dynamic'))
    votes = db.relationship('ComplaintVote', backref='complaint', cascade='all, delete-orphan',
                            order_by='ComplaintVote.id')
    internal_notes = db.relationship('InternalNote', backref='complaint',
                                     cascade='all, delete-orphan',
                                     order_by='[InternalNote.added_at, InternalNote.id]')
    status_updates = db.relationship('StatusUpdate', backref='complaint', lazy='dynamic',
                                     order_by='[StatusUpdate.created_at, StatusUpdate.id]')

    def __init__(self, owner=None, **kwargs):
        """Initialize complaint"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
        self.owner = owner if owner is not None else AnonymousOwner()

    @property
    def owner(self) -> Owner:
        if self.citizen_id is not None:
            return RegisteredOwner(user_id=self.citizen_id)
        return AnonymousOwner(
            name=self.anonymous_name,
            email=self.anonymous_email,
            phone=self.anonymous_phone,
        )

    @owner.setter
    def owner(self, owner: Owner):
        if isinstance(owner, RegisteredOwner):
            self.citizen_id = owner.user_id
            self.anonymous_name = None
            self.anonymous_email = None
            self.anonymous_phone = None
        elif isinstance(owner, AnonymousOwner):
            self.citizen_id = None
            self.anonymous_name = owner.name
            self.anonymous_email = owner.email
            self.anonymous_phone = owner.phone
        else:
            raise TypeError(f'Unsupported complaint owner: {owner!r}')

    @property
    def is_anonymous(self):
        return isinstance(self.owner, AnonymousOwner)

    def is_owned_by(self, user_id):
        owner = self.owner
        return isinstance(owner, RegisteredOwner) and owner.user_id == user_id

    @property
    def has_feedback(self):
        return self.feedback_by_id is not None or self.feedback_rating is not None

    def find_vote(self, user_id):
        for vote in self.votes:
            if vote.user_id == user_id:
                return vote
        return None

    def recalculate_vote_count(self):
        """Recount votes from the stored list"""
        upvotes = sum(1 for v in self.votes if v.vote_type == VoteType.UPVOTE)
        downvotes = sum(1 for v in self.votes if v.vote_type == VoteType.DOWNVOTE)
        self.vote_count = upvotes - downvotes
        return self.vote_count

    def feedback_to_dict(self):
        if not self.has_feedback:
            return None
        return {
            'rating': self.feedback_rating,
            'comment': self.feedback_comment,
            'submitted_by': self.feedback_by_id,
            'submitted_at': self.feedback_at.isoformat() if self.feedback_at else None,
        }

    def owner_to_dict(self):
        owner = self.owner
        if isinstance(owner, RegisteredOwner):
            citizen = self.citizen
            return {
                'type': 'registered',
                'user_id': owner.user_id,
                'username': citizen.username if citizen else None,
            }
        return {
            'type': 'anonymous',
            'name': owner.name,
            'email': owner.email,
            'phone': owner.phone,
        }

    def to_public_dict(self):
        """Fields safe to list publicly"""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category.value,
            'location': {
                'latitude': self.latitude,
                'longitude': self.longitude,
                'address': self.address,
            },
            'status': self.status.value,
            'vote_count': self.vote_count,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self, include_internal=False):
        """Convert complaint to dictionary"""
        data = self.to_public_dict()
        data.update({
            'image_url': self.image_url,
            'priority': self.priority.value,
            'assigned_department': self.assigned_department.value,
            'assigned_to': self.assigned_to,
            'escalated': self.escalated,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'feedback': self.feedback_to_dict(),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        })

        if include_internal:
            data['owner'] = self.owner_to_dict()
            data['internal_notes'] = [note.to_dict() for note in self.internal_notes]
            data['votes'] = [vote.to_dict() for vote in self.votes]
        else:
            data['owner'] = {'type': 'anonymous' if self.is_anonymous else 'registered'}

        return data

    def __repr__(self):
        return f'<Complaint {self.id} - {self.status.value if self.status else None}>'


class ComplaintVote(db.Model):
    """One user's vote on a complaint"""

    __tablename__ = 'complaint_votes'
    __table_args__ = (
        db.UniqueConstraint('complaint_id', 'user_id', name='uq_complaint_votes_user'),
    )

    id = db.Column(db.Integer, primary_key=True)
    complaint_id = db.Column(db.Integer, db.ForeignKey('complaints.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    vote_type = db.Column(enum_column_type(VoteType), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'vote_type': self.vote_type.value,
        }


class InternalNote(db.Model):
    """Admin-only note attached to a complaint"""

    __tablename__ = 'complaint_notes'

    id = db.Column(db.Integer, primary_key=True)
    complaint_id = db.Column(db.Integer, db.ForeignKey('complaints.id'), nullable=False, index=True)
    note = db.Column(db.Text, nullable=False)
    added_by = db.Column(db.String(80), nullable=False)
    added_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'note': self.note,
            'added_by': self.added_by,
            'added_at': self.added_at.isoformat() if self.added_at else None,
        }
