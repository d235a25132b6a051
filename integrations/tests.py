"""
Tests for the Facebook page integration.
"""
from types import SimpleNamespace
from unittest import mock
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from django.contrib.auth import get_user_model
from django.core import signing
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from news.models import Post
from news.services import create_post
from sites.models import SiteSettings
from taxonomy.models import Category, District
from taxonomy.services import save_taxonomy
from . import facebook
from .facebook import FacebookError, FacebookPublisher
from .facebook_views import STATE_SALT


def _response(status_code=200, payload=None):
    response = mock.Mock(status_code=status_code)
    response.json.return_value = payload or {}
    return response


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
    api_client.user = user
    return api_client


@pytest.fixture
def connected_page():
    return SiteSettings.update(
        facebook_app_id='1234567890',
        facebook_app_secret='app-secret',
        facebook_page_id='55501',
        facebook_page_name='Daily Dhaka',
        facebook_page_access_token='page-token',
        facebook_connected=True,
        facebook_auto_post=True,
    )


@pytest.fixture
def post_data():
    category = save_taxonomy(Category(), 'Sports')
    district = save_taxonomy(District(), 'Sylhet')
    return {
        'title': 'Cricket Final Tonight',
        'excerpt': 'The national team plays the final in Sylhet tonight.',
        'body': 'Fans gathered outside the stadium hours before the match began. ' * 2,
        'image_url': 'https://cdn.example.com/cricket.jpg',
        'image_public_id': 'news/cricket',
        'category': category,
        'district': district,
        'author': 'Sports Desk',
        'meta_title': 'Cricket final tonight',
        'meta_description': 'The national team plays the final in Sylhet.',
        'status': Post.STATUS_PUBLISHED,
        'tags': ['cricket'],
    }


class TestGraphClient:

    def test_login_url(self):
        url = facebook.get_login_url('123', 'https://api.example.com/cb/', 'state-1')
        query = parse_qs(urlparse(url).query)
        assert url.startswith('https://www.facebook.com/v18.0/dialog/oauth')
        assert query['client_id'] == ['123']
        assert query['state'] == ['state-1']
        assert 'pages_manage_posts' in query['scope'][0]

    def test_exchange_code(self):
        with mock.patch('integrations.facebook.requests.request',
                        return_value=_response(payload={'access_token': 'user-token'})) as request:
            token = facebook.exchange_code_for_token('123', 'secret', 'code-1', 'https://api.example.com/cb/')
        assert token == 'user-token'
        assert request.call_args.kwargs['params']['code'] == 'code-1'

    def test_graph_error_message_is_raised(self):
        error = _response(400, {'error': {'message': 'Invalid OAuth access token.'}})
        with mock.patch('integrations.facebook.requests.request', return_value=error):
            with pytest.raises(FacebookError, match='Invalid OAuth access token.'):
                facebook.get_user_pages('bad-token')

    def test_network_error_is_wrapped(self):
        with mock.patch('integrations.facebook.requests.request',
                        side_effect=requests.ConnectionError('unreachable')):
            with pytest.raises(FacebookError):
                facebook.get_user_pages('token')

    def test_post_with_image_goes_to_photos(self):
        with mock.patch('integrations.facebook.requests.request',
                        return_value=_response(payload={'id': 'p1'})) as request:
            facebook.post_to_page('55501', 'page-token', 'hello', link='https://x', image_url='https://img')
        method, url = request.call_args.args
        assert method == 'POST'
        assert url.endswith('/55501/photos')
        assert request.call_args.kwargs['data']['caption'] == 'hello'

    def test_post_without_image_goes_to_feed(self):
        with mock.patch('integrations.facebook.requests.request',
                        return_value=_response(payload={'id': 'p1'})) as request:
            facebook.post_to_page('55501', 'page-token', 'hello', link='https://x')
        assert request.call_args.args[1].endswith('/55501/feed')
        assert request.call_args.kwargs['data']['link'] == 'https://x'

    def test_format_post(self):
        message = facebook.format_facebook_post(
            'Cricket Final', 'Tonight in Sylhet.', 'Sports', 'https://news.example.com/news/cricket-final', 'Sylhet'
        )
        assert message.startswith('⚽ Cricket Final')
        assert '📍 Sylhet' in message
        assert '#sports' in message
        assert 'https://news.example.com/news/cricket-final' in message

    def test_unknown_category_uses_default_emoji(self):
        message = facebook.format_facebook_post('Title', 'Excerpt', 'Weather', 'https://x')
        assert message.startswith(facebook.DEFAULT_EMOJI)


class TestPublisher:

    def test_available_requires_connection_and_token(self):
        assert not FacebookPublisher().available
        assert not FacebookPublisher(page_id='1', page_access_token='t').available
        assert FacebookPublisher(page_id='1', page_access_token='t', connected=True).available

    def test_share_when_unavailable_raises(self):
        with pytest.raises(FacebookError):
            FacebookPublisher().share(SimpleNamespace())

    def test_share_uses_placeholder_aware_url(self):
        post = SimpleNamespace(
            pk=42, slug='post', title='বন্যা', excerpt='Excerpt text', image_url='',
            category_id=1, category=SimpleNamespace(name='Politics'),
            district_id=None, district=None,
        )
        publisher = FacebookPublisher(page_id='55501', page_access_token='t', connected=True)
        with mock.patch('integrations.facebook.post_to_page', return_value={'id': 'p1'}) as post_to_page:
            publisher.share(post)
        assert post_to_page.call_args.kwargs['link'].endswith('/news/42')
        assert post_to_page.call_args.kwargs['image_url'] is None


@pytest.mark.django_db
class TestAutoShare:

    def test_published_post_is_shared(self, connected_page, post_data):
        with mock.patch('integrations.facebook.post_to_page', return_value={'id': 'p1'}) as post_to_page:
            post = create_post(post_data)
        post_to_page.assert_called_once()
        assert post_to_page.call_args.kwargs['link'].endswith(f'/news/{post.slug}')

    def test_draft_is_not_shared(self, connected_page, post_data):
        post_data['status'] = Post.STATUS_DRAFT
        with mock.patch('integrations.facebook.post_to_page') as post_to_page:
            create_post(post_data)
        post_to_page.assert_not_called()

    def test_auto_post_off(self, connected_page, post_data):
        SiteSettings.update(facebook_auto_post=False)
        with mock.patch('integrations.facebook.post_to_page') as post_to_page:
            create_post(post_data)
        post_to_page.assert_not_called()

    def test_failure_does_not_undo_post(self, connected_page, post_data):
        with mock.patch('integrations.facebook.post_to_page', side_effect=FacebookError('Rate limited')):
            post = create_post(post_data)
        assert Post.objects.filter(pk=post.pk).exists()


@pytest.mark.django_db
class TestFacebookViews:

    def test_status(self, authenticated_client, connected_page):
        response = authenticated_client.get('/api/v1/admin/facebook/')
        assert response.status_code == 200
        assert response.data['connected'] is True
        assert response.data['page_name'] == 'Daily Dhaka'
        assert 'page-token' not in str(response.data)

    def test_save_credentials(self, authenticated_client):
        response = authenticated_client.post(
            '/api/v1/admin/facebook/credentials/', {'app_id': '1234567890', 'app_secret': 'secret'}
        )
        assert response.status_code == 200
        assert SiteSettings.load().facebook_app_id == '1234567890'

    def test_app_id_must_be_numeric(self, authenticated_client):
        response = authenticated_client.post(
            '/api/v1/admin/facebook/credentials/', {'app_id': 'abc', 'app_secret': 'secret'}
        )
        assert response.status_code == 400

    def test_auth_url_requires_credentials(self, authenticated_client):
        response = authenticated_client.get('/api/v1/admin/facebook/auth-url/')
        assert response.status_code == 503

    def test_auth_url(self, authenticated_client, connected_page):
        response = authenticated_client.get('/api/v1/admin/facebook/auth-url/')
        assert response.status_code == 200
        query = parse_qs(urlparse(response.data['auth_url']).query)
        assert query['redirect_uri'][0].endswith('/api/v1/admin/facebook/callback/')

    def test_callback_connects_first_page(self, api_client):
        SiteSettings.update(facebook_app_id='1234567890', facebook_app_secret='secret')
        state = signing.dumps({'user_id': 1, 'nonce': 'n'}, salt=STATE_SALT)
        pages = [
            {'id': '777', 'name': 'Daily Dhaka', 'access_token': 'page-token'},
            {'id': '888', 'name': 'Other Page', 'access_token': 'other-token'},
        ]
        with mock.patch('integrations.facebook.exchange_code_for_token', return_value='user-token'), \
                mock.patch('integrations.facebook.get_user_pages', return_value=pages):
            response = api_client.get('/api/v1/admin/facebook/callback/', {'code': 'abc', 'state': state})

        assert response.status_code == 302
        assert 'success=connected' in response['Location']
        current = SiteSettings.load()
        assert current.facebook_connected
        assert current.facebook_page_id == '777'
        assert current.facebook_auto_post is False

    def test_callback_rejects_bad_state(self, api_client):
        response = api_client.get('/api/v1/admin/facebook/callback/', {'code': 'abc', 'state': 'forged'})
        assert response.status_code == 302
        assert 'error=invalid_state' in response['Location']
        assert not SiteSettings.load().facebook_connected

    def test_callback_without_pages(self, api_client):
        SiteSettings.update(facebook_app_id='1234567890', facebook_app_secret='secret')
        state = signing.dumps({'user_id': 1, 'nonce': 'n'}, salt=STATE_SALT)
        with mock.patch('integrations.facebook.exchange_code_for_token', return_value='user-token'), \
                mock.patch('integrations.facebook.get_user_pages', return_value=[]):
            response = api_client.get('/api/v1/admin/facebook/callback/', {'code': 'abc', 'state': state})
        assert 'error=' in response['Location']

    def test_disconnect(self, authenticated_client, connected_page):
        with mock.patch('integrations.facebook.revoke_permissions', return_value=True) as revoke:
            response = authenticated_client.post('/api/v1/admin/facebook/disconnect/')
        assert response.status_code == 200
        revoke.assert_called_once_with('page-token')
        current = SiteSettings.load()
        assert not current.facebook_connected
        assert current.facebook_page_access_token is None

    def test_toggle_auto_post(self, authenticated_client, connected_page):
        response = authenticated_client.post('/api/v1/admin/facebook/auto-post/')
        assert response.data['auto_post'] is False


@pytest.mark.django_db
class TestManualShare:

    def test_share(self, authenticated_client, connected_page, post_data):
        SiteSettings.update(facebook_auto_post=False)
        post = create_post(post_data)
        with mock.patch('integrations.facebook.post_to_page', return_value={'id': '55501_1'}):
            response = authenticated_client.post(f'/api/v1/admin/posts/{post.id}/share-facebook/')
        assert response.status_code == 200
        assert response.data['facebook_post_id'] == '55501_1'

    def test_graph_failure_is_502(self, authenticated_client, connected_page, post_data):
        SiteSettings.update(facebook_auto_post=False)
        post = create_post(post_data)
        with mock.patch('integrations.facebook.post_to_page', side_effect=FacebookError('Token expired')):
            response = authenticated_client.post(f'/api/v1/admin/posts/{post.id}/share-facebook/')
        assert response.status_code == 502
        assert response.data == {'error': 'Token expired'}

    def test_not_connected(self, authenticated_client, post_data):
        post = create_post(post_data)
        response = authenticated_client.post(f'/api/v1/admin/posts/{post.id}/share-facebook/')
        assert response.status_code == 400

    def test_draft_cannot_be_shared(self, authenticated_client, connected_page, post_data):
        post_data['status'] = Post.STATUS_DRAFT
        post = create_post(post_data)
        response = authenticated_client.post(f'/api/v1/admin/posts/{post.id}/share-facebook/')
        assert response.status_code == 400
