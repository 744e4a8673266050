import io
import os

import pytest

from extensions import db
from app.models import Complaint, StatusUpdate


def history(app, complaint_id):
    with app.app_context():
        return [(u.status.value, u.comment, u.updated_by)
                for u in StatusUpdate.query.filter_by(complaint_id=complaint_id)
                .order_by(StatusUpdate.created_at, StatusUpdate.id)]


# ----------------------------------------------------------------------
# Submission

def test_anonymous_submission_creates_pending_complaint_with_one_history_entry(app, client, submit):
    complaint_id = submit(citizen_name='Ravi', citizen_phone='98450')

    with app.app_context():
        complaint = db.session.get(Complaint, complaint_id)
        assert complaint.status.value == 'pending'
        assert complaint.priority.value == 'medium'
        assert complaint.vote_count == 0
        assert complaint.escalated is False
        assert complaint.is_anonymous
        assert complaint.owner.name == 'Ravi'
        assert complaint.citizen_id is None

    assert history(app, complaint_id) == [('pending', 'Complaint submitted', 'Anonymous')]


def test_registered_submission_is_owned_by_caller(app, client, citizen, submit):
    user, headers = citizen
    complaint_id = submit(headers)

    with app.app_context():
        complaint = db.session.get(Complaint, complaint_id)
        assert complaint.is_owned_by(user['id'])
        assert complaint.anonymous_name is None

    assert history(app, complaint_id) == [('pending', 'Complaint submitted', 'alice')]

    mine = client.get('/api/complaints/my-complaints', headers=headers).get_json()['complaints']
    assert [c['id'] for c in mine] == [complaint_id]


def test_logged_in_user_may_still_submit_anonymously(app, client, citizen, submit):
    _, headers = citizen
    complaint_id = submit(headers, is_anonymous=True, citizen_email='anon@example.com')

    with app.app_context():
        complaint = db.session.get(Complaint, complaint_id)
        assert complaint.is_anonymous
        assert complaint.owner.email == 'anon@example.com'

    assert client.get('/api/complaints/my-complaints', headers=headers).get_json()['complaints'] == []


@pytest.mark.parametrize('category, department', [
    ('garbage', 'sanitation'),
    ('pothole', 'roads'),
    ('sidewalk', 'roads'),
    ('streetlight', 'electricity'),
    ('drainage', 'water'),
    ('traffic', 'traffic'),
    ('other', 'general'),
])
def test_category_routes_to_default_department(client, admin_headers, submit, category, department):
    complaint_id = submit(category=category)

    body = client.get(f'/api/complaints/{complaint_id}', headers=admin_headers).get_json()
    assert body['complaint']['assigned_department'] == department


@pytest.mark.parametrize('overrides, message', [
    ({'title': ''}, 'title is required'),
    ({'category': 'volcano'}, 'Invalid category'),
    ({'latitude': 'north'}, 'latitude must be a number'),
    ({'longitude': 200}, 'longitude must be between -180 and 180'),
])
def test_submission_validation(app, client, overrides, message):
    payload = {
        'title': 'Broken light', 'description': 'Dark street',
        'category': 'streetlight', 'latitude': 10, 'longitude': 10,
    }
    payload.update(overrides)

    response = client.post('/api/complaints', json=payload)

    assert response.status_code == 400
    assert response.get_json()['error'].startswith(message)
    with app.app_context():
        assert Complaint.query.count() == 0
        assert StatusUpdate.query.count() == 0


def test_multipart_submission_stores_image(app, client, png_bytes):
    response = client.post('/api/complaints', data={
        'title': 'Overflowing bin',
        'description': 'Not collected for a week',
        'category': 'garbage',
        'latitude': '12.9',
        'longitude': '77.6',
        'isAnonymous': 'true',
        'image': (io.BytesIO(png_bytes), 'bin.png', 'image/png'),
    }, content_type='multipart/form-data')

    assert response.status_code == 201
    image_url = response.get_json()['complaint']['image_url']
    assert image_url.startswith('/uploads/') and image_url.endswith('.png')

    stored = os.path.join(app.config['UPLOAD_FOLDER'], os.path.basename(image_url))
    assert os.path.exists(stored)
    assert client.get(image_url).status_code == 200


def test_non_image_upload_is_rejected(app, client):
    response = client.post('/api/complaints', data={
        'title': 'Overflowing bin',
        'description': 'Not collected for a week',
        'category': 'garbage',
        'latitude': '12.9',
        'longitude': '77.6',
        'image': (io.BytesIO(b'#!/bin/sh\necho hi\n'), 'script.sh', 'text/x-shellscript'),
    }, content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Only image files are allowed'}
    with app.app_context():
        assert Complaint.query.count() == 0


def test_image_with_fake_extension_is_rejected(client):
    response = client.post('/api/complaints', data={
        'title': 'Fake', 'description': 'Not really a png', 'category': 'other',
        'latitude': '1', 'longitude': '1',
        'image': (io.BytesIO(b'plain text'), 'photo.png', 'image/png'),
    }, content_type='multipart/form-data')

    assert response.status_code == 400


# ----------------------------------------------------------------------
# Reads

def test_public_listing_defaults_to_pending(client, admin_headers, submit):
    first = submit(title='First')
    second = submit(title='Second')
    client.put(f'/api/complaints/{first}/status', json={'status': 'resolved'}, headers=admin_headers)

    pending = client.get('/api/complaints/public').get_json()['complaints']
    resolved = client.get('/api/complaints/public?status=resolved').get_json()['complaints']

    assert [c['id'] for c in pending] == [second]
    assert [c['id'] for c in resolved] == [first]
    assert 'assigned_to' not in pending[0]
    assert client.get('/api/complaints/public?status=bogus').status_code == 400


def test_detail_hides_internal_fields_from_public(client, admin_headers, submit):
    complaint_id = submit(citizen_name='Ravi')
    client.put(f'/api/admin/complaints/{complaint_id}', json={'internal_note': 'call the contractor'},
               headers=admin_headers)

    public = client.get(f'/api/complaints/{complaint_id}').get_json()
    admin = client.get(f'/api/complaints/{complaint_id}', headers=admin_headers).get_json()

    assert 'internal_notes' not in public['complaint']
    assert public['complaint']['owner'] == {'type': 'anonymous'}
    assert admin['complaint']['internal_notes'][0]['note'] == 'call the contractor'
    assert admin['complaint']['owner']['name'] == 'Ravi'
    assert [u['status'] for u in public['status_updates']] == ['pending', 'pending']


def test_unknown_complaint_is_404(client):
    response = client.get('/api/complaints/999')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Complaint not found'}


def test_admin_listing_requires_admin(client, citizen):
    _, headers = citizen
    assert client.get('/api/complaints').status_code == 401
    assert client.get('/api/complaints', headers=headers).status_code == 403


# ----------------------------------------------------------------------
# Status and transfer

def test_status_update_appends_history(app, client, admin_headers, submit):
    complaint_id = submit()

    response = client.put(f'/api/complaints/{complaint_id}/status', json={
        'status': 'in_progress', 'comment': 'Crew dispatched', 'assigned_to': 'Ward 12 crew',
    }, headers=admin_headers)

    assert response.status_code == 200
    complaint = response.get_json()['complaint']
    assert complaint['status'] == 'in_progress'
    assert complaint['assigned_to'] == 'Ward 12 crew'
    assert history(app, complaint_id) == [
        ('pending', 'Complaint submitted', 'Anonymous'),
        ('in_progress', 'Crew dispatched', 'admin'),
    ]


def test_status_may_move_backwards(app, client, admin_headers, submit):
    complaint_id = submit()
    for status in ('resolved', 'pending'):
        response = client.put(f'/api/complaints/{complaint_id}/status', json={'status': status},
                              headers=admin_headers)
        assert response.status_code == 200

    assert [entry[0] for entry in history(app, complaint_id)] == ['pending', 'resolved', 'pending']


def test_status_update_rejects_citizens_and_bad_input(app, client, citizen, admin_headers, submit):
    _, headers = citizen
    complaint_id = submit(headers)

    forbidden = client.put(f'/api/complaints/{complaint_id}/status', json={'status': 'resolved'}, headers=headers)
    missing = client.put(f'/api/complaints/{complaint_id}/status', json={}, headers=admin_headers)
    invalid = client.put(f'/api/complaints/{complaint_id}/status', json={'status': 'done'}, headers=admin_headers)
    unknown = client.put('/api/complaints/999/status', json={'status': 'resolved'}, headers=admin_headers)

    assert forbidden.status_code == 403
    assert forbidden.get_json() == {'error': 'Admin access required'}
    assert missing.status_code == 400
    assert invalid.status_code == 400
    assert unknown.status_code == 404
    assert len(history(app, complaint_id)) == 1


def test_transfer_changes_department_but_not_status(app, client, admin_headers, submit):
    complaint_id = submit(category='garbage')

    response = client.put(f'/api/complaints/{complaint_id}/transfer', json={'department': 'water'},
                          headers=admin_headers)

    assert response.status_code == 200
    complaint = response.get_json()['complaint']
    assert complaint['assigned_department'] == 'water'
    assert complaint['status'] == 'pending'
    assert history(app, complaint_id)[-1] == ('pending', 'Transferred from sanitation to water', 'admin')

    bad = client.put(f'/api/complaints/{complaint_id}/transfer', json={'department': 'parks'},
                     headers=admin_headers)
    assert bad.status_code == 400


# ----------------------------------------------------------------------
# Votes

def test_votes_are_one_per_user(client, citizen, other_citizen, submit):
    _, alice = citizen
    _, bob = other_citizen
    complaint_id = submit()
    url = f'/api/complaints/{complaint_id}/vote'

    first = client.post(url, json={'vote_type': 'upvote'}, headers=alice)
    assert first.get_json()['vote_count'] == 1

    repeat = client.post(url, json={'vote_type': 'upvote'}, headers=alice)
    assert repeat.status_code == 200
    assert repeat.get_json() == {'message': 'Already voted with this type', 'vote_count': 1}

    assert client.post(url, json={'voteType': 'downvote'}, headers=bob).get_json()['vote_count'] == 0
    assert client.post(url, json={'vote_type': 'downvote'}, headers=alice).get_json()['vote_count'] == -2
    assert client.post(url, json={'vote_type': 'upvote'}, headers=bob).get_json()['vote_count'] == 0


def test_vote_requires_login_and_valid_type(client, citizen, submit):
    _, headers = citizen
    complaint_id = submit()

    assert client.post(f'/api/complaints/{complaint_id}/vote', json={'vote_type': 'upvote'}).status_code == 401
    invalid = client.post(f'/api/complaints/{complaint_id}/vote', json={'vote_type': 'sideways'}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.get_json() == {'error': 'Invalid vote type'}
    assert client.post('/api/complaints/999/vote', json={'vote_type': 'upvote'}, headers=headers).status_code == 404


# ----------------------------------------------------------------------
# Feedback

def test_feedback_only_after_resolution_by_owner_once(client, citizen, other_citizen, admin_headers, submit):
    _, alice = citizen
    _, bob = other_citizen
    complaint_id = submit(alice)
    url = f'/api/complaints/{complaint_id}/feedback'

    early = client.post(url, json={'rating': 5}, headers=alice)
    assert early.status_code == 400
    assert early.get_json() == {'error': 'Can only provide feedback for resolved complaints'}

    client.put(f'/api/complaints/{complaint_id}/status', json={'status': 'resolved'}, headers=admin_headers)

    stranger = client.post(url, json={'rating': 5}, headers=bob)
    assert stranger.status_code == 403

    out_of_range = client.post(url, json={'rating': 6}, headers=alice)
    assert out_of_range.status_code == 400

    accepted = client.post(url, json={'rating': 4, 'comment': 'Fixed quickly'}, headers=alice)
    assert accepted.status_code == 200
    assert accepted.get_json()['feedback']['rating'] == 4
    assert accepted.get_json()['feedback']['comment'] == 'Fixed quickly'

    again = client.post(url, json={'rating': 1}, headers=alice)
    assert again.status_code == 400
    assert again.get_json() == {'error': 'Feedback already submitted for this complaint'}

    detail = client.get(f'/api/complaints/{complaint_id}').get_json()
    assert detail['complaint']['feedback']['rating'] == 4


def test_anonymous_complaint_accepts_no_feedback(client, citizen, admin_headers, submit):
    _, headers = citizen
    complaint_id = submit()
    client.put(f'/api/complaints/{complaint_id}/status', json={'status': 'resolved'}, headers=admin_headers)

    response = client.post(f'/api/complaints/{complaint_id}/feedback', json={'rating': 3}, headers=headers)
    assert response.status_code == 403
