"""
Complaint Routes
"""

from flask import Blueprint, request, jsonify

from extensions import db
from app.errors import ApiError
from app.policy import Capability
from app.services.analytics_service import AnalyticsService
from app.services.complaint_service import ComplaintService, UNSET
from app.services.storage_service import LocalStorageService
from app.utils.decorators import requires, current_identity
from app.utils.pagination import get_page_args

complaints_bp = Blueprint('complaints', __name__)


def _payload():
    """JSON body, or form fields for multipart submissions"""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@complaints_bp.route('', methods=['GET'])
@requires(Capability.READ_ANY)
def list_complaints():
    """Filtered, paginated complaint list (admin)"""
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


@complaints_bp.route('', methods=['POST'])
@requires(Capability.WRITE_OWN, optional=True)
def submit_complaint():
    """Submit a new complaint, with or without an account"""
    data = _payload()
    image_url = LocalStorageService.save_image(request.files.get('image'))

    try:
        complaint = ComplaintService(db.session).submit(data, actor=current_identity(), image_url=image_url)
    except ApiError:
        LocalStorageService.delete_image(image_url)
        raise

    return jsonify({
        'id': complaint.id,
        'message': 'Complaint submitted successfully',
        'complaint': complaint.to_dict()
    }), 201


@complaints_bp.route('/public', methods=['GET'])
def get_public_complaints():
    """Public listing filtered by status"""
    complaints = ComplaintService(db.session).list_public(request.args.get('status'))

    return jsonify({
        'complaints': [c.to_public_dict() for c in complaints]
    }), 200


@complaints_bp.route('/my-complaints', methods=['GET'])
@requires(Capability.READ_OWN)
def get_my_complaints():
    """Current user's own complaints"""
    complaints = ComplaintService(db.session).list_for_owner(current_identity())

    return jsonify({
        'complaints': [c.to_dict() for c in complaints]
    }), 200


@complaints_bp.route('/<int:complaint_id>', methods=['GET'])
@requires(optional=True, ignore_invalid=True)
def get_complaint(complaint_id):
    """Single complaint with its status history"""
    service = ComplaintService(db.session)
    complaint = service.get(complaint_id)

    identity = current_identity()
    include_internal = identity is not None and identity.can(Capability.READ_ANY)

    return jsonify({
        'complaint': complaint.to_dict(include_internal=include_internal),
        'status_updates': [u.to_dict() for u in service.history(complaint)]
    }), 200


@complaints_bp.route('/<int:complaint_id>/status', methods=['PUT'])
@requires(Capability.WRITE_ANY)
def update_complaint_status(complaint_id):
    """Change status, and optionally department and assignee"""
    data = request.get_json(silent=True) or {}

    complaint = ComplaintService(db.session).update_status(
        complaint_id,
        data.get('status'),
        current_identity(),
        comment=data.get('comment'),
        department=data.get('assigned_department') or data.get('department'),
        assigned_to=data.get('assigned_to', UNSET),
    )

    return jsonify({
        'message': 'Status updated successfully',
        'complaint': complaint.to_dict(include_internal=True)
    }), 200


@complaints_bp.route('/<int:complaint_id>/transfer', methods=['PUT'])
@requires(Capability.WRITE_ANY)
def transfer_complaint(complaint_id):
    """Transfer complaint to a different department"""
    data = request.get_json(silent=True) or {}

    complaint = ComplaintService(db.session).transfer_department(
        complaint_id,
        data.get('department'),
        current_identity(),
        comment=data.get('comment'),
    )

    return jsonify({
        'message': 'Complaint transferred successfully',
        'complaint': complaint.to_dict(include_internal=True)
    }), 200


@complaints_bp.route('/<int:complaint_id>/vote', methods=['POST'])
@requires(Capability.WRITE_OWN)
def vote_on_complaint(complaint_id):
    """Upvote or downvote a complaint"""
    data = request.get_json(silent=True) or {}
    vote_type = data.get('vote_type') or data.get('voteType')

    vote_count, changed = ComplaintService(db.session).vote(complaint_id, vote_type, current_identity())

    return jsonify({
        'message': 'Vote recorded successfully' if changed else 'Already voted with this type',
        'vote_count': vote_count
    }), 200


@complaints_bp.route('/<int:complaint_id>/feedback', methods=['POST'])
@requires(Capability.WRITE_OWN)
def submit_feedback(complaint_id):
    """Rate a resolved complaint"""
    data = request.get_json(silent=True) or {}

    complaint = ComplaintService(db.session).submit_feedback(
        complaint_id,
        data.get('rating'),
        current_identity(),
        comment=data.get('comment'),
    )

    return jsonify({
        'message': 'Feedback submitted successfully',
        'feedback': complaint.feedback_to_dict()
    }), 200


@complaints_bp.route('/stats/overview', methods=['GET'])
@requires(Capability.ADMIN)
def get_statistics():
    """Complaint counts (admin)"""
    return jsonify(AnalyticsService(db.session).stats_overview()), 200


@complaints_bp.route('/analytics/overview', methods=['GET'])
@requires(Capability.ADMIN)
def get_analytics():
    """Aggregated analytics over a trailing window (admin)"""
    period = request.args.get('period', 30)
    return jsonify(AnalyticsService(db.session).overview(period)), 200
