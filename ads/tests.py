"""
Tests for ad management and public ad lookup.
"""
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from sites.models import SiteSettings
from .models import Ad, get_active_ad


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


@pytest.fixture
def create_ad():
    def _create_ad(title='Mobile Banking', placement=Ad.SIDEBAR_PRIMARY, is_active=True):
        return Ad.objects.create(
            title=title,
            placement=placement,
            image_url='https://cdn.example.com/ad.jpg',
            image_public_id='ads/ad',
            target_url='https://sponsor.example.com',
            is_active=is_active,
        )
    return _create_ad


@pytest.mark.django_db
class TestActiveAd:

    def test_newest_active_ad_wins(self, create_ad):
        older = create_ad('Older')
        newer = create_ad('Newer')
        Ad.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=1))
        create_ad('Paused', is_active=False)
        assert get_active_ad(Ad.SIDEBAR_PRIMARY) == newer

    def test_public_lookup(self, api_client, create_ad):
        SiteSettings.update(ads_enabled=True)
        ad = create_ad()
        response = api_client.get('/api/v1/ads/active/sidebar_primary/')
        assert response.status_code == 200
        assert response.data['enabled'] is True
        assert response.data['ad']['id'] == ad.id

    def test_public_lookup_without_ad(self, api_client):
        SiteSettings.update(ads_enabled=True)
        response = api_client.get('/api/v1/ads/active/footer_strip/')
        assert response.data == {'enabled': True, 'ad': None}

    def test_globally_disabled(self, api_client, create_ad):
        create_ad()
        SiteSettings.update(ads_enabled=False)
        response = api_client.get('/api/v1/ads/active/sidebar_primary/')
        assert response.data == {'enabled': False, 'ad': None}

    def test_invalid_placement(self, api_client):
        response = api_client.get('/api/v1/ads/active/popup/')
        assert response.status_code == 400


@pytest.mark.django_db
class TestAdAdminAPI:

    def test_create(self, authenticated_client):
        response = authenticated_client.post('/api/v1/admin/ads/', {
            'title': 'Mobile Banking',
            'placement': 'homepage_banner',
            'image_url': 'https://cdn.example.com/ad.jpg',
            'image_public_id': 'ads/ad',
            'target_url': '',
        }, format='json')
        assert response.status_code == 201
        assert response.data['target_url'] is None
        assert response.data['placement_label'] == 'Homepage Banner'

    def test_title_required(self, authenticated_client):
        response = authenticated_client.post('/api/v1/admin/ads/', {
            'title': ' ',
            'placement': 'homepage_banner',
            'image_url': 'https://cdn.example.com/ad.jpg',
            'image_public_id': 'ads/ad',
        }, format='json')
        assert response.status_code == 400

    def test_filter_by_placement(self, authenticated_client, create_ad):
        create_ad()
        create_ad(placement=Ad.FOOTER_STRIP)
        response = authenticated_client.get('/api/v1/admin/ads/?placement=footer_strip')
        assert len(response.data) == 1

    def test_toggle_flips(self, authenticated_client, create_ad):
        ad = create_ad()
        response = authenticated_client.post(f'/api/v1/admin/ads/{ad.id}/toggle/')
        assert response.data['is_active'] is False

    def test_toggle_explicit(self, authenticated_client, create_ad):
        ad = create_ad(is_active=False)
        response = authenticated_client.post(f'/api/v1/admin/ads/{ad.id}/toggle/', {'is_active': True}, format='json')
        assert response.data['is_active'] is True

    def test_delete_returns_public_id(self, authenticated_client, create_ad):
        ad = create_ad()
        response = authenticated_client.delete(f'/api/v1/admin/ads/{ad.id}/')
        assert response.status_code == 200
        assert response.data['image_public_id'] == 'ads/ad'
        assert not Ad.objects.exists()

    def test_toggle_global_is_not_an_ad_detail(self, authenticated_client):
        response = authenticated_client.post('/api/v1/admin/ads/toggle-global/')
        assert response.status_code == 200
        assert 'enabled' in response.data
