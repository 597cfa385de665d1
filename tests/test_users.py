import json

import pytest

from fitbook.models import Booking, Review, Service, User

from conftest import TEST_PASSWORD


@pytest.mark.users
class TestProfile:
    """Test suite for the caller's own profile."""

    def test_get_profile(self, client, client_user, auth_headers):
        response = client.get('/api/users/profile', headers=auth_headers(client_user))

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['id'] == client_user.id
        assert data['email'] == 'client@example.com'
        assert data['birth_date'] == '1990-05-17'
        assert 'password_hash' not in data

    def test_update_profile_partial(self, client, client_user, auth_headers):
        response = client.put(
            '/api/users/profile',
            data=json.dumps({'firstName': 'Carlota', 'gender': 'other'}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['user']['first_name'] == 'Carlota'
        assert data['user']['gender'] == 'other'
        assert data['user']['last_name'] == 'Client'

    def test_update_profile_rejects_empty_name(self, client, client_user, auth_headers):
        response = client.put(
            '/api/users/profile',
            data=json.dumps({'firstName': ''}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )

        assert response.status_code == 400

    @pytest.mark.parametrize('field', ['firstName', 'lastName'])
    def test_update_profile_rejects_null_name(self, client, db_session, client_user, auth_headers, field):
        response = client.put(
            '/api/users/profile',
            data=json.dumps({field: None}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['error'] == 'invalid_argument'
        db_session.refresh(client_user)
        assert client_user.first_name == 'Carla'
        assert client_user.last_name == 'Client'

    def test_update_profile_clears_optional_field(self, client, client_user, auth_headers):
        """Nullable fields can still be cleared with an explicit null."""
        response = client.put(
            '/api/users/profile',
            data=json.dumps({'gender': None}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )

        assert response.status_code == 200
        assert json.loads(response.data)['user']['gender'] is None

    def test_change_password(self, client, client_user, auth_headers):
        response = client.put(
            '/api/users/profile/password',
            data=json.dumps({'currentPassword': TEST_PASSWORD, 'newPassword': 'Brand-new9'}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )
        assert response.status_code == 200

        old_login = client.post(
            '/api/auth/login',
            data=json.dumps({'email': client_user.email, 'password': TEST_PASSWORD}),
            content_type='application/json'
        )
        new_login = client.post(
            '/api/auth/login',
            data=json.dumps({'email': client_user.email, 'password': 'Brand-new9'}),
            content_type='application/json'
        )
        assert old_login.status_code == 401
        assert new_login.status_code == 200

    def test_change_password_wrong_current(self, client, client_user, auth_headers):
        response = client.put(
            '/api/users/profile/password',
            data=json.dumps({'currentPassword': 'Nope1234!', 'newPassword': 'Brand-new9'}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )

        assert response.status_code == 400
        assert json.loads(response.data)['message'] == 'The current password is incorrect'

    def test_change_password_weak_new(self, client, client_user, auth_headers):
        response = client.put(
            '/api/users/profile/password',
            data=json.dumps({'currentPassword': TEST_PASSWORD, 'newPassword': 'weak'}),
            content_type='application/json',
            headers=auth_headers(client_user)
        )

        assert response.status_code == 400

    def test_delete_account_cascades(
        self, client, db_session, trainer, client_user, service, make_booking, make_review, auth_headers
    ):
        booking = make_booking(service, client_user, status='completed')
        make_review(booking)
        headers = auth_headers(trainer)

        response = client.delete('/api/users/profile', headers=headers)

        assert response.status_code == 200
        assert db_session.query(User).filter_by(email='trainer@example.com').count() == 0
        assert db_session.query(Service).count() == 0
        assert db_session.query(Booking).count() == 0
        assert db_session.query(Review).count() == 0

        response = client.get('/api/users/profile', headers=headers)
        assert response.status_code == 401


@pytest.mark.users
class TestTrainerDirectory:
    """Public trainer listings."""

    def test_list_trainers_only(self, client, client_user, trainer, other_trainer):
        response = client.get('/api/users/trainers')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert {t['id'] for t in data} == {trainer.id, other_trainer.id}
        assert all('email' not in t for t in data)

    def test_trainer_detail_lists_published_services(self, client, trainer, make_service):
        make_service(trainer, title='Visible')
        make_service(trainer, title='Hidden', is_published=False)

        response = client.get(f'/api/users/trainers/{trainer.id}')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['first_name'] == 'Tomás'
        assert [s['title'] for s in data['services']] == ['Visible']

    def test_trainer_detail_for_client_id(self, client, client_user):
        response = client.get(f'/api/users/trainers/{client_user.id}')

        assert response.status_code == 404

    def test_trainer_detail_unknown(self, client):
        response = client.get('/api/users/trainers/999')

        assert response.status_code == 404
        data = json.loads(response.data)
        assert data['error'] == 'not_found'


def test_connection(client):
    """Test that the API is reachable."""
    response = client.get('/')

    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'ok'
