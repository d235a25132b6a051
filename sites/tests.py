"""
Tests for site settings and the global ads switch.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from .models import SiteSettings, GLOBAL_KEY


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def authenticated_client(api_client):
    user = get_user_model().objects.create_user(
        email='admin@example.com', username='admin@example.com', password='testpass123', is_staff=True
    )
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
    return api_client


@pytest.mark.django_db
class TestSiteSettingsModel:

    def test_load_creates_single_row(self):
        first = SiteSettings.load()
        second = SiteSettings.load()
        assert first.pk == second.pk
        assert first.key == GLOBAL_KEY
        assert SiteSettings.objects.count() == 1

    def test_update_upserts(self):
        SiteSettings.update(contact_phone='+880 2 5555555')
        assert SiteSettings.load().contact_phone == '+880 2 5555555'


@pytest.mark.django_db
class TestSiteSettingsAPI:

    def test_public_settings(self, api_client):
        SiteSettings.update(logo_url='https://cdn.example.com/logo.png', facebook_app_secret='s3cret')
        response = api_client.get('/api/v1/site-settings/public/')
        assert response.status_code == 200
        assert response.data['logo_url'] == 'https://cdn.example.com/logo.png'
        assert 'facebook_app_secret' not in response.data

    def test_admin_requires_authentication(self, api_client):
        assert api_client.get('/api/v1/admin/site-settings/').status_code == 401

    def test_admin_hides_secrets(self, authenticated_client):
        SiteSettings.update(facebook_app_id='123', facebook_app_secret='s3cret')
        response = authenticated_client.get('/api/v1/admin/site-settings/')
        assert response.data['facebook_configured'] is True
        assert 's3cret' not in str(response.data)

    def test_patch_reports_replaced_images(self, authenticated_client):
        SiteSettings.update(logo_url='https://cdn.example.com/old.png', logo_public_id='branding/old')
        response = authenticated_client.patch('/api/v1/admin/site-settings/', {
            'logo_url': 'https://cdn.example.com/new.png',
            'logo_public_id': 'branding/new',
            'contact_email': 'desk@example.com',
        }, format='json')
        assert response.status_code == 200
        assert response.data['replaced_public_ids'] == ['branding/old']
        assert SiteSettings.load().contact_email == 'desk@example.com'

    def test_blank_clears_field(self, authenticated_client):
        SiteSettings.update(contact_address='House 1, Road 2')
        authenticated_client.patch('/api/v1/admin/site-settings/', {'contact_address': '  '}, format='json')
        assert SiteSettings.load().contact_address is None

    def test_invalid_email(self, authenticated_client):
        response = authenticated_client.patch(
            '/api/v1/admin/site-settings/', {'contact_email': 'not-an-email'}, format='json'
        )
        assert response.status_code == 400

    def test_toggle_ads_global(self, authenticated_client):
        SiteSettings.update(ads_enabled=True)
        response = authenticated_client.post('/api/v1/admin/ads/toggle-global/')
        assert response.data == {'success': True, 'enabled': False}
        response = authenticated_client.post('/api/v1/admin/ads/toggle-global/')
        assert response.data['enabled'] is True
