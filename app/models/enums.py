"""
Complaint enums and the category -> department mapping
"""

from enum import Enum
from extensions import db


class ComplaintCategory(str, Enum):
    POTHOLE = 'pothole'
    GARBAGE = 'garbage'
    STREETLIGHT = 'streetlight'
    TRAFFIC = 'traffic'
    SIDEWALK = 'sidewalk'
    DRAINAGE = 'drainage'
    ELECTRICITY = 'electricity'
    WATER = 'water'
    OTHER = 'other'


class ComplaintStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'


class ComplaintPriority(str, Enum):
    """Canonical priority scale; 'emergency' is read as URGENT"""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.lower() == 'emergency':
            return cls.URGENT
        return None


class DepartmentCode(str, Enum):
    SANITATION = 'sanitation'
    ROADS = 'roads'
    ELECTRICITY = 'electricity'
    WATER = 'water'
    TRAFFIC = 'traffic'
    GENERAL = 'general'


class VoteType(str, Enum):
    UPVOTE = 'upvote'
    DOWNVOTE = 'downvote'


DEPARTMENT_BY_CATEGORY = {
    ComplaintCategory.POTHOLE: DepartmentCode.ROADS,
    ComplaintCategory.SIDEWALK: DepartmentCode.ROADS,
    ComplaintCategory.GARBAGE: DepartmentCode.SANITATION,
    ComplaintCategory.STREETLIGHT: DepartmentCode.ELECTRICITY,
    ComplaintCategory.ELECTRICITY: DepartmentCode.ELECTRICITY,
    ComplaintCategory.WATER: DepartmentCode.WATER,
    ComplaintCategory.DRAINAGE: DepartmentCode.WATER,
    ComplaintCategory.TRAFFIC: DepartmentCode.TRAFFIC,
    ComplaintCategory.OTHER: DepartmentCode.GENERAL,
}


def default_department_for(category):
    """Department a new complaint of this category is routed to"""
    return DEPARTMENT_BY_CATEGORY.get(ComplaintCategory(category), DepartmentCode.GENERAL)


def enum_column_type(enum_cls):
    """Column type storing the enum's values rather than its member names"""
    return db.Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=20,
    )
