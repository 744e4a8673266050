"""
Analytics Service
All figures are computed from the complaints table on every call.
"""

from collections import Counter
from datetime import datetime, timedelta

from sqlalchemy import func

from app.errors import ValidationError
from app.models.complaint import Complaint
from app.models.enums import ComplaintStatus
from app.models.user import User, UserRole


SECONDS_PER_DAY = 60 * 60 * 24


class AnalyticsService:
    """Aggregates over the complaint store"""

    def __init__(self, session):
        self.session = session

    def _count(self, *criteria):
        query = self.session.query(func.count(Complaint.id))
        if criteria:
            query = query.filter(*criteria)
        return query.scalar() or 0

    def _grouped(self, column, key):
        rows = (self.session.query(column, func.count(Complaint.id).label('count'))
                .group_by(column)
                .order_by(func.count(Complaint.id).desc(), column)
                .all())
        return [{key: value.value if value is not None else None, 'count': count} for value, count in rows]

    def status_counts(self):
        return {
            'total': self._count(),
            'pending': self._count(Complaint.status == ComplaintStatus.PENDING),
            'in_progress': self._count(Complaint.status == ComplaintStatus.IN_PROGRESS),
            'resolved': self._count(Complaint.status == ComplaintStatus.RESOLVED),
        }

    def average_resolution_days(self):
        """Mean of (updated_at - created_at) over resolved complaints, in days"""
        rows = (self.session.query(Complaint.created_at, Complaint.updated_at)
                .filter(Complaint.status == ComplaintStatus.RESOLVED)
                .all())
        durations = [
            (updated - created).total_seconds() / SECONDS_PER_DAY
            for created, updated in rows
            if created and updated
        ]
        if not durations:
            return 0
        return sum(durations) / len(durations)

    def complaints_by_day(self, period_days, now=None):
        """Daily counts for complaints created in the trailing window"""
        now = now or datetime.utcnow()
        start = now - timedelta(days=period_days)
        created = (self.session.query(Complaint.created_at)
                   .filter(Complaint.created_at >= start)
                   .all())
        buckets = Counter(row.created_at.date().isoformat() for row in created)
        return [{'date': day, 'count': buckets[day]} for day in sorted(buckets)]

    def top_voted(self, limit=10):
        complaints = (self.session.query(Complaint)
                      .order_by(Complaint.vote_count.desc(), Complaint.created_at.desc())
                      .limit(limit)
                      .all())
        return [
            {
                'id': c.id,
                'title': c.title,
                'category': c.category.value,
                'status': c.status.value,
                'vote_count': c.vote_count,
                'citizen': c.citizen.username if c.citizen else None,
            }
            for c in complaints
        ]

    def feedback_summary(self):
        average, total = (self.session.query(func.avg(Complaint.feedback_rating),
                                             func.count(Complaint.feedback_rating))
                          .filter(Complaint.feedback_rating.isnot(None))
                          .one())
        return {
            'average_rating': float(average) if average is not None else 0,
            'total_feedback': total or 0,
        }

    def stats_overview(self):
        data = self.status_counts()
        data['categories'] = self._grouped(Complaint.category, 'category')
        data['departments'] = self._grouped(Complaint.assigned_department, 'department')
        return data

    def overview(self, period=30):
        try:
            period_days = int(period)
        except (TypeError, ValueError):
            raise ValidationError('period must be a whole number of days')
        if period_days < 1:
            raise ValidationError('period must be at least 1 day')

        return {
            'overview': self.status_counts(),
            'categories': self._grouped(Complaint.category, 'category'),
            'departments': self._grouped(Complaint.assigned_department, 'department'),
            'priorities': self._grouped(Complaint.priority, 'priority'),
            'average_resolution_time': self.average_resolution_days(),
            'complaints_by_time': self.complaints_by_day(period_days),
            'top_voted_complaints': self.top_voted(),
            'feedback': self.feedback_summary(),
            'period_days': period_days,
        }

    def dashboard_summary(self):
        counts = self.status_counts()
        counts['escalated'] = self._count(Complaint.escalated.is_(True))

        citizens = self.session.query(func.count(User.id)).filter(User.role == UserRole.CITIZEN)
        return {
            'complaints': counts,
            'users': {
                'total': citizens.scalar() or 0,
                'active': citizens.filter(User.is_active.is_(True)).scalar() or 0,
                'blocked': citizens.filter(User.is_active.is_(False)).scalar() or 0,
            },
        }
