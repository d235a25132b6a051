"""
Tests for accounts app authentication.
"""
from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import override_settings
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from newsdesk_backend.config import NewsdeskConfig

User = get_user_model()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def create_user():
    def _create_user(email="admin@example.com", password="testpass123", is_staff=True):
        return User.objects.create_user(
            email=email,
            username=email,
            password=password,
            is_staff=is_staff,
        )
    return _create_user


@pytest.fixture
def authenticated_client(api_client, create_user):
    user = create_user()
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
    return api_client, user


@pytest.mark.django_db
class TestAuthentication:

    def test_login_success(self, api_client, create_user):
        user = create_user()
        response = api_client.post('/api/v1/auth/login/', {
            'email': user.email,
            'password': 'testpass123'
        })
        assert response.status_code == 200
        assert 'token' in response.data
        assert 'refresh_token' in response.data
        assert response.data['user']['email'] == user.email

    def test_login_is_case_insensitive_on_email(self, api_client, create_user):
        create_user()
        response = api_client.post('/api/v1/auth/login/', {
            'email': 'Admin@Example.com',
            'password': 'testpass123'
        })
        assert response.status_code == 200

    def test_login_invalid_credentials(self, api_client, create_user):
        create_user()
        response = api_client.post('/api/v1/auth/login/', {
            'email': 'admin@example.com',
            'password': 'wrongpassword'
        })
        assert response.status_code == 400

    def test_login_rejects_non_staff(self, api_client, create_user):
        create_user(email='reader@example.com', is_staff=False)
        response = api_client.post('/api/v1/auth/login/', {
            'email': 'reader@example.com',
            'password': 'testpass123'
        })
        assert response.status_code == 400

    def test_login_missing_fields(self, api_client):
        response = api_client.post('/api/v1/auth/login/', {
            'email': 'admin@example.com'
        })
        assert response.status_code == 400

    def test_me_authenticated(self, authenticated_client):
        client, user = authenticated_client
        response = client.get('/api/v1/auth/me/')
        assert response.status_code == 200
        assert response.data['user']['email'] == user.email

    def test_me_unauthenticated(self, api_client):
        response = api_client.get('/api/v1/auth/me/')
        assert response.status_code == 401

    def test_logout_blacklists_refresh_token(self, api_client, create_user):
        user = create_user()
        refresh = RefreshToken.for_user(user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')

        response = api_client.post('/api/v1/auth/logout/', {'refresh_token': str(refresh)})
        assert response.status_code == 200

        response = api_client.post('/api/v1/auth/logout/', {'refresh_token': str(refresh)})
        assert response.status_code == 400


@pytest.mark.django_db
class TestProfile:

    def test_update_name_and_phone(self, authenticated_client):
        client, user = authenticated_client
        response = client.patch('/api/v1/auth/profile/', {'name': 'Desk Editor', 'phone': '+8801700000000'})
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.name == 'Desk Editor'
        assert user.phone == '+8801700000000'

    def test_change_password_requires_current_password(self, authenticated_client):
        client, user = authenticated_client
        response = client.patch('/api/v1/auth/profile/', {
            'current_password': 'not-the-password',
            'new_password': 'newsecret123',
            'confirm_password': 'newsecret123',
        })
        assert response.status_code == 400
        assert 'current_password' in response.data
        user.refresh_from_db()
        assert user.check_password('testpass123')

    def test_change_password_mismatch(self, authenticated_client):
        client, _ = authenticated_client
        response = client.patch('/api/v1/auth/profile/', {
            'current_password': 'testpass123',
            'new_password': 'newsecret123',
            'confirm_password': 'different123',
        })
        assert response.status_code == 400
        assert 'confirm_password' in response.data

    def test_change_password(self, authenticated_client):
        client, user = authenticated_client
        response = client.patch('/api/v1/auth/profile/', {
            'current_password': 'testpass123',
            'new_password': 'newsecret123',
            'confirm_password': 'newsecret123',
        })
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.check_password('newsecret123')

    def test_email_must_be_unique(self, authenticated_client, create_user):
        client, _ = authenticated_client
        create_user(email='other@example.com')
        response = client.patch('/api/v1/auth/profile/', {'email': 'other@example.com'})
        assert response.status_code == 400


def _config(**overrides):
    values = {
        'site_url': 'https://news.example.com',
        'admin_email': 'boss@example.com',
        'admin_password': 'supersecret',
        'ads_enabled': True,
        'facebook_graph_version': 'v18.0',
        'facebook_hashtag': 'news',
    }
    values.update(overrides)
    return NewsdeskConfig(**values)


@pytest.mark.django_db
class TestBootstrapAdmin:

    def test_creates_staff_user(self):
        with override_settings(NEWSDESK=_config()):
            call_command('bootstrap_admin', stdout=StringIO())
        user = User.objects.get(email='boss@example.com')
        assert user.is_staff
        assert user.check_password('supersecret')

    def test_existing_password_kept_without_reset(self, create_user):
        create_user(email='boss@example.com', password='keepthis123')
        with override_settings(NEWSDESK=_config()):
            call_command('bootstrap_admin', stdout=StringIO())
        assert User.objects.get(email='boss@example.com').check_password('keepthis123')

    def test_reset_password(self, create_user):
        create_user(email='boss@example.com', password='keepthis123')
        with override_settings(NEWSDESK=_config()):
            call_command('bootstrap_admin', '--reset-password', stdout=StringIO())
        assert User.objects.get(email='boss@example.com').check_password('supersecret')

    def test_missing_credentials(self):
        with override_settings(NEWSDESK=_config(admin_password='')):
            with pytest.raises(CommandError):
                call_command('bootstrap_admin', stdout=StringIO())
