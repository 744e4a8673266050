from conftest import bearer


def test_register_returns_tokens_and_citizen_role(client):
    response = client.post('/api/auth/register', json={
        'username': 'carol',
        'email': 'Carol@Example.com',
        'password': 'secret123',
        'first_name': 'Carol',
        'address': {'city': 'Pune', 'zip_code': '411001'},
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body['access_token']
    assert body['refresh_token']
    assert body['user']['role'] == 'citizen'
    assert body['user']['email'] == 'carol@example.com'
    assert body['user']['address']['city'] == 'Pune'
    assert body['user']['address']['country'] == 'India'


def test_register_ignores_requested_admin_role(client):
    response = client.post('/api/auth/register', json={
        'username': 'mallory', 'email': 'm@example.com', 'password': 'secret123', 'role': 'admin',
    })

    assert response.status_code == 201
    assert response.get_json()['user']['role'] == 'citizen'


def test_register_rejects_duplicates_and_short_passwords(client, citizen):
    duplicate_name = client.post('/api/auth/register', json={
        'username': 'alice', 'email': 'other@example.com', 'password': 'secret123',
    })
    duplicate_email = client.post('/api/auth/register', json={
        'username': 'alice2', 'email': 'ALICE@example.com', 'password': 'secret123',
    })
    short = client.post('/api/auth/register', json={
        'username': 'dave', 'email': 'dave@example.com', 'password': '123',
    })
    missing = client.post('/api/auth/register', json={'username': 'erin'})

    assert duplicate_name.status_code == 409
    assert duplicate_email.status_code == 409
    assert short.status_code == 400
    assert missing.status_code == 400
    assert 'error' in missing.get_json()


def test_login_by_username_or_email(client, citizen):
    by_name = client.post('/api/auth/login', json={'username': 'alice', 'password': 'secret123'})
    by_email = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'secret123'})

    assert by_name.status_code == 200
    assert by_email.status_code == 200
    assert by_name.get_json()['user']['last_login'] is not None


def test_login_with_wrong_password_is_401(client, citizen):
    response = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrong-pass'})
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Invalid credentials'}


def test_seeded_admin_can_login(client):
    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin123'})
    assert response.status_code == 200
    assert response.get_json()['user']['role'] == 'admin'


def test_me_requires_token(client):
    assert client.get('/api/auth/me').status_code == 401


def test_me_rejects_garbage_token(client):
    response = client.get('/api/auth/me', headers=bearer('not-a-jwt'))
    assert response.status_code == 403


def test_me_returns_current_user(client, citizen):
    user, headers = citizen
    response = client.get('/api/auth/me', headers=headers)

    assert response.status_code == 200
    assert response.get_json()['user']['id'] == user['id']


def test_refresh_issues_new_access_token(client):
    register = client.post('/api/auth/register', json={
        'username': 'frank', 'email': 'frank@example.com', 'password': 'secret123',
    }).get_json()

    response = client.post('/api/auth/refresh', headers=bearer(register['refresh_token']))

    assert response.status_code == 200
    new_token = response.get_json()['access_token']
    assert client.get('/api/auth/me', headers=bearer(new_token)).status_code == 200


def test_blocked_user_cannot_login_or_use_old_token(client, citizen, admin_headers):
    user, headers = citizen

    blocked = client.put(f"/api/admin/users/{user['id']}/status",
                         json={'is_active': False}, headers=admin_headers)
    assert blocked.status_code == 200

    login = client.post('/api/auth/login', json={'username': 'alice', 'password': 'secret123'})
    assert login.status_code == 403

    assert client.get('/api/auth/me', headers=headers).status_code == 403


def test_update_profile_and_change_password(client, citizen, login):
    _, headers = citizen

    response = client.put('/api/users/me', json={
        'first_name': 'Alice',
        'address': {'city': 'Mysuru'},
        'phone': '9999999999',
    }, headers=headers)

    assert response.status_code == 200
    user = response.get_json()['user']
    assert user['first_name'] == 'Alice'
    assert user['address']['city'] == 'Mysuru'
    assert user['phone'] == '9999999999'

    wrong = client.post('/api/users/me/change-password', json={
        'current_password': 'nope', 'new_password': 'another123',
    }, headers=headers)
    assert wrong.status_code == 401

    changed = client.post('/api/users/me/change-password', json={
        'current_password': 'secret123', 'new_password': 'another123',
    }, headers=headers)
    assert changed.status_code == 200
    assert login('alice', 'another123')


def test_update_profile_rejects_out_of_range_location(client, citizen):
    _, headers = citizen
    response = client.put('/api/users/me', json={'latitude': 123, 'longitude': 10}, headers=headers)
    assert response.status_code == 400
