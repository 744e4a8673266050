"""
Complaint Lifecycle Service
Creation, status transitions, transfers, voting, feedback and admin updates.
Each mutation is committed together with the StatusUpdate it produces.
"""

from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.errors import (
    ValidationError,
    NotFoundError,
    AuthorizationError,
    StateError,
    StorageError,
)
from app.models.complaint import Complaint, ComplaintVote, InternalNote, RegisteredOwner, AnonymousOwner
from app.models.enums import (
    ComplaintCategory,
    ComplaintStatus,
    ComplaintPriority,
    DepartmentCode,
    VoteType,
    default_department_for,
)
from app.models.status_update import StatusUpdate
from app.policy import Capability, authorize
from app.utils.pagination import paginate
from app.utils.validators import (
    require_fields,
    parse_enum,
    parse_coordinates,
    parse_bool,
    parse_rating,
    parse_datetime,
    parse_str,
)


SORTABLE_COLUMNS = {
    'created_at': Complaint.created_at,
    'updated_at': Complaint.updated_at,
    'vote_count': Complaint.vote_count,
    'priority': Complaint.priority,
    'status': Complaint.status,
}

ADMIN_UPDATE_FIELDS = ('status', 'priority', 'assigned_department', 'assigned_to', 'escalated', 'deadline')

# Fields an explicit null clears; a null on any other field leaves it as is
CLEARABLE_FIELDS = ('assigned_to', 'deadline')

# Marks an argument the caller did not send
UNSET = object()


class ComplaintService:
    """Business rules for the complaint lifecycle"""

    def __init__(self, session):
        self.session = session

    # ------------------------------------------------------------------
    # Persistence helpers

    def _commit(self, action):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f'Database error while trying to {action}: {str(e)}')
            raise StorageError()

    def _record_status(self, complaint, updated_by, comment=None, department=None):
        """Queue the history entry for the complaint's current status"""
        update = StatusUpdate(
            complaint=complaint,
            status=complaint.status,
            comment=comment,
            updated_by=updated_by,
            department=department,
        )
        self.session.add(update)
        return update

    # ------------------------------------------------------------------
    # Reads

    def get(self, complaint_id):
        complaint = self.session.get(Complaint, complaint_id)
        if not complaint:
            raise NotFoundError('Complaint not found')
        return complaint

    def history(self, complaint):
        return complaint.status_updates.all()

    def list_public(self, status=None):
        status = parse_enum(ComplaintStatus, status or ComplaintStatus.PENDING.value, 'status')
        return (Complaint.query
                .filter(Complaint.status == status)
                .order_by(Complaint.created_at.desc(), Complaint.id.desc())
                .all())

    def list_for_owner(self, actor):
        authorize(actor, Capability.READ_OWN)
        return (Complaint.query
                .filter(Complaint.citizen_id == actor.id)
                .order_by(Complaint.created_at.desc(), Complaint.id.desc())
                .all())

    def list_filtered(self, filters, page, limit, sort_by='created_at', sort_order='desc'):
        """Filtered, paginated listing for administrators"""
        query = Complaint.query

        if filters.get('status'):
            query = query.filter(Complaint.status == parse_enum(ComplaintStatus, filters['status'], 'status'))
        if filters.get('category'):
            query = query.filter(Complaint.category == parse_enum(ComplaintCategory, filters['category'], 'category'))
        if filters.get('department'):
            query = query.filter(
                Complaint.assigned_department == parse_enum(DepartmentCode, filters['department'], 'department')
            )
        if filters.get('priority'):
            query = query.filter(
                Complaint.priority == parse_enum(ComplaintPriority, filters['priority'], 'priority')
            )
        if filters.get('escalated') not in (None, ''):
            query = query.filter(Complaint.escalated == parse_bool(filters['escalated'], 'escalated'))

        column = SORTABLE_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(f'Cannot sort by {sort_by}')
        ordering = column.asc() if sort_order == 'asc' else column.desc()
        query = query.order_by(ordering, Complaint.id.asc() if sort_order == 'asc' else Complaint.id.desc())

        return paginate(query, page, limit)

    # ------------------------------------------------------------------
    # Lifecycle operations

    def submit(self, data, actor=None, image_url=None):
        """
        File a new complaint

        Args:
            data: Submitted fields (form or JSON)
            actor: Identity of the caller, or None when anonymous
            image_url: Already-stored photo URL

        Returns:
            The persisted Complaint
        """
        require_fields(data, ['title', 'description', 'category', 'latitude', 'longitude'])

        title = parse_str(data['title'], 'title')
        description = parse_str(data['description'], 'description')
        category = parse_enum(ComplaintCategory, data['category'], 'category')
        latitude, longitude = parse_coordinates(data['latitude'], data['longitude'])
        wants_anonymous = parse_bool(data.get('is_anonymous', data.get('isAnonymous')), 'is_anonymous')

        if actor is not None and not wants_anonymous:
            authorize(actor, Capability.WRITE_OWN)
            owner = RegisteredOwner(user_id=actor.id)
        else:
            owner = AnonymousOwner(
                name=parse_str(data.get('citizen_name'), 'citizen_name') or None,
                email=parse_str(data.get('citizen_email'), 'citizen_email') or None,
                phone=parse_str(data.get('citizen_phone'), 'citizen_phone') or None,
            )

        complaint = Complaint(
            owner=owner,
            title=title,
            description=description,
            category=category,
            latitude=latitude,
            longitude=longitude,
            address=parse_str(data.get('address'), 'address') or None,
            image_url=image_url,
            status=ComplaintStatus.PENDING,
            priority=ComplaintPriority.MEDIUM,
            assigned_department=default_department_for(category),
            escalated=False,
            vote_count=0,
        )
        self.session.add(complaint)
        self._record_status(
            complaint,
            updated_by=actor.username if actor is not None else 'Anonymous',
            comment='Complaint submitted',
        )
        self._commit('submit complaint')

        current_app.logger.info(
            f'Complaint {complaint.id} submitted ({category.value} -> {complaint.assigned_department.value})'
        )
        return complaint

    def update_status(self, complaint_id, status, actor, comment=None, department=None, assigned_to=UNSET):
        """
        Set a new status; any status may follow any other

        assigned_to is left alone when not passed; None or '' clears it.
        """
        authorize(actor, Capability.WRITE_ANY)

        if not status:
            raise ValidationError('Status is required')
        new_status = parse_enum(ComplaintStatus, status, 'status')
        new_department = parse_enum(DepartmentCode, department, 'department') if department else None
        comment = parse_str(comment, 'comment') or None
        if assigned_to is not UNSET:
            assigned_to = parse_str(assigned_to, 'assigned_to') or None

        complaint = self.get(complaint_id)
        old_status = complaint.status

        complaint.status = new_status
        if new_department:
            complaint.assigned_department = new_department
        if assigned_to is not UNSET:
            complaint.assigned_to = assigned_to

        self._record_status(
            complaint,
            updated_by=actor.username,
            comment=comment,
            department=complaint.assigned_department,
        )
        self._commit('update complaint status')

        current_app.logger.info(
            f'Complaint {complaint.id} status {old_status.value} -> {new_status.value} by {actor.username}'
        )
        return complaint

    def transfer_department(self, complaint_id, department, actor, comment=None):
        """Move the complaint to another department without touching its status"""
        authorize(actor, Capability.WRITE_ANY)

        if not department:
            raise ValidationError('Department is required')
        new_department = parse_enum(DepartmentCode, department, 'department')
        comment = parse_str(comment, 'comment')

        complaint = self.get(complaint_id)
        old_department = complaint.assigned_department
        complaint.assigned_department = new_department

        self._record_status(
            complaint,
            updated_by=actor.username,
            comment=comment or f'Transferred from {old_department.value} to {new_department.value}',
            department=new_department,
        )
        self._commit('transfer complaint')

        current_app.logger.info(
            f'Complaint {complaint.id} transferred {old_department.value} -> {new_department.value}'
        )
        return complaint

    def vote(self, complaint_id, vote_type, actor):
        """
        Record actor's vote

        Returns:
            (vote_count, changed) where changed is False when the same vote
            was already on record
        """
        authorize(actor, Capability.WRITE_OWN)

        if not isinstance(vote_type, str) or vote_type not in {v.value for v in VoteType}:
            raise ValidationError('Invalid vote type')
        vote_type = VoteType(vote_type)

        complaint = self.get(complaint_id)
        existing = complaint.find_vote(actor.id)

        if existing is not None and existing.vote_type == vote_type:
            return complaint.vote_count, False

        if existing is not None:
            existing.vote_type = vote_type
        else:
            complaint.votes.append(ComplaintVote(user_id=actor.id, vote_type=vote_type))

        complaint.recalculate_vote_count()
        self._commit('record vote')
        return complaint.vote_count, True

    def submit_feedback(self, complaint_id, rating, actor, comment=None):
        """Attach the owner's one-time rating to a resolved complaint"""
        authorize(actor, Capability.WRITE_OWN)

        rating = parse_rating(rating)
        comment = parse_str(comment, 'comment') or None
        complaint = self.get(complaint_id)

        if complaint.status != ComplaintStatus.RESOLVED:
            raise StateError('Can only provide feedback for resolved complaints')

        if not complaint.is_owned_by(actor.id):
            raise AuthorizationError('Only the original complainant can provide feedback')

        if complaint.has_feedback:
            raise StateError('Feedback already submitted for this complaint')

        complaint.feedback_rating = rating
        complaint.feedback_comment = comment
        complaint.feedback_by_id = actor.id
        complaint.feedback_at = datetime.utcnow()
        self._commit('submit feedback')
        return complaint

    def admin_update(self, complaint_id, fields, actor, internal_note=None):
        """
        Apply any subset of the triage fields; omitted fields stay as they are

        An explicit null clears assigned_to and deadline and is ignored for
        the other fields.
        """
        authorize(actor, Capability.WRITE_ANY)

        changes = {
            key: fields[key] for key in ADMIN_UPDATE_FIELDS
            if key in fields and (fields[key] is not None or key in CLEARABLE_FIELDS)
        }

        # Validate everything before touching the record
        parsed = {}
        if 'status' in changes:
            parsed['status'] = parse_enum(ComplaintStatus, changes['status'], 'status')
        if 'priority' in changes:
            parsed['priority'] = parse_enum(ComplaintPriority, changes['priority'], 'priority')
        if 'assigned_department' in changes:
            parsed['assigned_department'] = parse_enum(
                DepartmentCode, changes['assigned_department'], 'assigned_department'
            )
        if 'assigned_to' in changes:
            parsed['assigned_to'] = parse_str(changes['assigned_to'], 'assigned_to') or None
        if 'escalated' in changes:
            parsed['escalated'] = parse_bool(changes['escalated'], 'escalated')
        if 'deadline' in changes:
            parsed['deadline'] = parse_datetime(changes['deadline'], 'deadline')

        note = parse_str(internal_note, 'internal_note') or None

        complaint = self.get(complaint_id)
        for key, value in parsed.items():
            setattr(complaint, key, value)

        if note:
            complaint.internal_notes.append(InternalNote(note=note, added_by=actor.username))

        self._record_status(
            complaint,
            updated_by=actor.username,
            comment=note or f'Updated by {actor.username}',
            department=complaint.assigned_department,
        )
        self._commit('update complaint')

        current_app.logger.info(
            f'Complaint {complaint.id} updated by {actor.username}: {", ".join(parsed) or "no field changes"}'
        )
        return complaint
