"""
Models package initialization
Import all models here for easy access
"""

from app.models.user import User, UserRole
from app.models.enums import (
    ComplaintCategory,
    ComplaintStatus,
    ComplaintPriority,
    DepartmentCode,
    VoteType,
    default_department_for,
)
from app.models.complaint import (
    Complaint,
    ComplaintVote,
    InternalNote,
    RegisteredOwner,
    AnonymousOwner,
)
from app.models.status_update import StatusUpdate
from app.models.department import Department
from app.models.officer import Officer

__all__ = [
    'User',
    'UserRole',
    'ComplaintCategory',
    'ComplaintStatus',
    'ComplaintPriority',
    'DepartmentCode',
    'VoteType',
    'default_department_for',
    'Complaint',
    'ComplaintVote',
    'InternalNote',
    'RegisteredOwner',
    'AnonymousOwner',
    'StatusUpdate',
    'Department',
    'Officer',
]
