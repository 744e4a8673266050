import io

import pytest
from PIL import Image

from app import create_app
from extensions import db


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


#scope : function < class < module < package < session
@pytest.fixture(scope="function")
def app(tmp_path):
    app = create_app('testing', {'UPLOAD_FOLDER': str(tmp_path / 'uploads')})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(username, password):
        response = client.post('/api/auth/login', json={'username': username, 'password': password})
        assert response.status_code == 200, response.get_json()
        return bearer(response.get_json()['access_token'])
    return _login


@pytest.fixture
def admin_headers(login):
    return login('admin', 'admin123')


@pytest.fixture
def register(client):
    def _register(username, password='secret123', **extra):
        payload = {'username': username, 'email': f'{username}@example.com', 'password': password}
        payload.update(extra)
        response = client.post('/api/auth/register', json=payload)
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body['user'], bearer(body['access_token'])
    return _register


@pytest.fixture
def citizen(register):
    """(user dict, headers) for a registered citizen"""
    return register('alice')


@pytest.fixture
def other_citizen(register):
    return register('bob')


@pytest.fixture
def submit(client):
    def _submit(headers=None, **overrides):
        payload = {
            'title': 'Large pothole on MG Road',
            'description': 'Deep pothole near the bus stop, dangerous for two-wheelers',
            'category': 'pothole',
            'latitude': 12.9716,
            'longitude': 77.5946,
            'address': 'MG Road, Bengaluru',
        }
        payload.update(overrides)
        response = client.post('/api/complaints', json=payload, headers=headers or {})
        assert response.status_code == 201, response.get_json()
        return response.get_json()['id']
    return _submit


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new('RGB', (8, 8), (200, 30, 30)).save(buffer, format='PNG')
    buffer.seek(0)
    return buffer.getvalue()
