"""
Admin Routes
Every endpoint here requires the admin capability.
"""

from flask import Blueprint, jsonify, request

from extensions import db
from app.errors import ValidationError, NotFoundError
from app.models.user import User, UserRole
from app.policy import Capability, authorize
from app.services.analytics_service import AnalyticsService
from app.services.complaint_service import ComplaintService, ADMIN_UPDATE_FIELDS
from app.services.directory_service import DirectoryService
from app.utils.decorators import resolve_identity, current_identity
from app.utils.pagination import get_page_args, paginate
from app.utils.validators import parse_bool

admin_bp = Blueprint('admin', __name__)


@admin_bp.before_request
def require_admin():
    if request.method == 'OPTIONS':
        return None
    authorize(resolve_identity(), Capability.ADMIN)


# ----------------------------------------------------------------------
# Dashboard

@admin_bp.route('/dashboard/summary', methods=['GET'])
def dashboard_summary():
    """Complaint and citizen totals"""
    return jsonify(AnalyticsService(db.session).dashboard_summary()), 200


# ----------------------------------------------------------------------
# Complaints

@admin_bp.route('/complaints', methods=['GET'])
def get_complaints():
    """Filtered, paginated complaints"""
    page, limit = get_page_args()
    complaints, pagination = ComplaintService(db.session).list_filtered(
        request.args, page, limit,
        sort_by=request.args.get('sort_by', 'created_at'),
        sort_order=request.args.get('sort_order', 'desc'),
    )

    return jsonify({
        'complaints': [c.to_dict(include_internal=True) for c in complaints],
        'pagination': pagination
    }), 200


@admin_bp.route('/complaints/<int:complaint_id>', methods=['GET'])
def get_complaint_details(complaint_id):
    """Complaint with owner, votes, notes and history"""
    service = ComplaintService(db.session)
    complaint = service.get(complaint_id)

    return jsonify({
        'complaint': complaint.to_dict(include_internal=True),
        'status_updates': [u.to_dict() for u in service.history(complaint)]
    }), 200


@admin_bp.route('/complaints/<int:complaint_id>', methods=['PUT'])
def update_complaint(complaint_id):
    """Assign, reprioritise, escalate, change status or add a note"""
    data = request.get_json(silent=True) or {}
    fields = {key: data[key] for key in ADMIN_UPDATE_FIELDS if key in data}

    complaint = ComplaintService(db.session).admin_update(
        complaint_id,
        fields,
        current_identity(),
        internal_note=data.get('internal_note'),
    )

    return jsonify({
        'message': 'Complaint updated successfully',
        'complaint': complaint.to_dict(include_internal=True)
    }), 200


@admin_bp.route('/complaints/<int:complaint_id>/report', methods=['GET'])
def complaint_report(complaint_id):
    """Full export of one complaint"""
    service = ComplaintService(db.session)
    complaint = service.get(complaint_id)

    report = complaint.to_dict(include_internal=True)
    report['complaint_id'] = report.pop('id')
    report['status_updates'] = [u.to_dict() for u in service.history(complaint)]
    report['officers'] = [
        {'id': o.id, 'name': o.name, 'email': o.email} for o in complaint.officers
    ]

    return jsonify({'report': report}), 200


# ----------------------------------------------------------------------
# Users

@admin_bp.route('/users', methods=['GET'])
def get_users():
    """Citizen accounts, newest first"""
    page, limit = get_page_args()

    query = User.query.filter(User.role == UserRole.CITIZEN)
    if request.args.get('is_active') not in (None, ''):
        query = query.filter(User.is_active == parse_bool(request.args['is_active'], 'is_active'))
    query = query.order_by(User.created_at.desc(), User.id.desc())

    users, pagination = paginate(query, page, limit)

    return jsonify({
        'users': [user.to_dict(include_private=True) for user in users],
        'pagination': pagination
    }), 200


@admin_bp.route('/users/<int:user_id>/status', methods=['PUT'])
def update_user_status(user_id):
    """Block or unblock a citizen"""
    data = request.get_json(silent=True) or {}

    if 'is_active' not in data:
        raise ValidationError('is_active is required')
    is_active = parse_bool(data['is_active'], 'is_active')

    user = db.session.get(User, user_id)
    if not user or user.role != UserRole.CITIZEN:
        raise NotFoundError('User not found')

    user.is_active = is_active
    db.session.commit()

    return jsonify({
        'message': f"User {'activated' if is_active else 'blocked'} successfully",
        'user': user.to_dict(include_private=True)
    }), 200


# ----------------------------------------------------------------------
# Departments

@admin_bp.route('/departments', methods=['GET'])
def get_departments():
    departments = DirectoryService(db.session).list_departments()
    return jsonify({
        'departments': [d.to_dict(include_officers=True) for d in departments]
    }), 200


@admin_bp.route('/departments', methods=['POST'])
def create_department():
    department = DirectoryService(db.session).create_department(request.get_json(silent=True) or {})
    return jsonify({
        'message': 'Department created successfully',
        'department': department.to_dict()
    }), 201


@admin_bp.route('/departments/<int:department_id>', methods=['PUT'])
def update_department(department_id):
    department = DirectoryService(db.session).update_department(
        department_id, request.get_json(silent=True) or {}
    )
    return jsonify({
        'message': 'Department updated successfully',
        'department': department.to_dict()
    }), 200


# ----------------------------------------------------------------------
# Officers

@admin_bp.route('/officers', methods=['GET'])
def get_officers():
    officers = DirectoryService(db.session).list_officers()
    return jsonify({
        'officers': [o.to_dict() for o in officers]
    }), 200


@admin_bp.route('/officers', methods=['POST'])
def create_officer():
    officer = DirectoryService(db.session).create_officer(request.get_json(silent=True) or {})
    return jsonify({
        'message': 'Officer created successfully',
        'officer': officer.to_dict()
    }), 201


@admin_bp.route('/officers/<int:officer_id>', methods=['PUT'])
def update_officer(officer_id):
    officer = DirectoryService(db.session).update_officer(officer_id, request.get_json(silent=True) or {})
    return jsonify({
        'message': 'Officer updated successfully',
        'officer': officer.to_dict()
    }), 200


@admin_bp.route('/officers/<int:officer_id>/assignments', methods=['POST'])
def assign_complaint_to_officer(officer_id):
    data = request.get_json(silent=True) or {}
    officer = DirectoryService(db.session).assign_complaint(officer_id, data.get('complaint_id'))
    return jsonify({
        'message': 'Complaint assigned successfully',
        'officer': officer.to_dict()
    }), 200
