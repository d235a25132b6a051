"""
Facebook page integration views

Provides endpoints for:
1. GET  /api/v1/admin/facebook/                  - Connection status
2. POST /api/v1/admin/facebook/credentials/      - Save app id / secret
3. GET  /api/v1/admin/facebook/auth-url/         - OAuth dialog URL
4. GET  /api/v1/admin/facebook/callback/         - OAuth callback
5. POST /api/v1/admin/facebook/disconnect/       - Forget the connected page
6. POST /api/v1/admin/facebook/auto-post/        - Toggle auto-share on publish
7. POST /api/v1/admin/posts/{id}/share-facebook/ - Manual share (news.views)
"""
import logging
import re
from urllib.parse import quote

from django.conf import settings
from django.core import signing
from django.shortcuts import redirect
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from sites.models import SiteSettings
from . import facebook

logger = logging.getLogger(__name__)

STATE_SALT = 'newsdesk.facebook.oauth'
STATE_MAX_AGE = 600


def _admin_redirect(query):
    return redirect(f"{settings.FRONTEND_URL}/admin/facebook?{query}")


def _callback_uri(request):
    return request.build_absolute_uri(reverse('facebook-callback'))


def _status_payload(site_settings):
    return {
        'configured': bool(site_settings.facebook_app_id and site_settings.facebook_app_secret),
        'app_id': site_settings.facebook_app_id,
        'connected': site_settings.facebook_connected,
        'page_id': site_settings.facebook_page_id,
        'page_name': site_settings.facebook_page_name,
        'auto_post': site_settings.facebook_auto_post,
        'connected_at': site_settings.facebook_connected_at,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def facebook_status(request):
    return Response(_status_payload(SiteSettings.load()))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def save_credentials(request):
    """
    POST /api/v1/admin/facebook/credentials/
    Body: { "app_id": "123456", "app_secret": "..." }
    """
    app_id = str(request.data.get('app_id', '')).strip()
    app_secret = str(request.data.get('app_secret', '')).strip()

    if not app_id or not app_secret:
        return Response({'error': 'Both App ID and App Secret are required'},
                        status=status.HTTP_400_BAD_REQUEST)
    if not re.fullmatch(r'\d+', app_id):
        return Response({'error': 'App ID should contain only numbers'},
                        status=status.HTTP_400_BAD_REQUEST)

    SiteSettings.update(facebook_app_id=app_id, facebook_app_secret=app_secret)
    logger.info(f"Facebook app credentials saved by {request.user}")
    return Response({'message': 'Facebook credentials saved successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_auth_url(request):
    """
    GET /api/v1/admin/facebook/auth-url/

    Returns: { "auth_url": "https://www.facebook.com/v18.0/dialog/oauth?..." }
    """
    site_settings = SiteSettings.load()
    if not (site_settings.facebook_app_id and site_settings.facebook_app_secret):
        return Response(
            {'error': 'Facebook App credentials not configured'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    # Signed state carries the user id and expires with STATE_MAX_AGE
    state = signing.dumps({'user_id': request.user.id, 'nonce': facebook.generate_state()}, salt=STATE_SALT)
    auth_url = facebook.get_login_url(site_settings.facebook_app_id, _callback_uri(request), state)
    return Response({'auth_url': auth_url})


@api_view(['GET'])
@permission_classes([AllowAny])
def oauth_callback(request):
    """
    Handle the Facebook OAuth callback.

    GET /api/v1/admin/facebook/callback/?code=...&state=...

    Exchanges the code, connects the first page the user manages and
    redirects back to the admin Facebook screen.
    """
    code = request.query_params.get('code')
    error = request.query_params.get('error_description') or request.query_params.get('error')

    if error:
        logger.error(f"Facebook OAuth error: {error}")
        return _admin_redirect(f"error={quote(error)}")
    if not code:
        return _admin_redirect("error=No%20authorization%20code%20received")

    try:
        signing.loads(request.query_params.get('state', ''), salt=STATE_SALT, max_age=STATE_MAX_AGE)
    except signing.BadSignature:
        return _admin_redirect("error=invalid_state")

    site_settings = SiteSettings.load()
    if not (site_settings.facebook_app_id and site_settings.facebook_app_secret):
        return _admin_redirect("error=Facebook%20App%20credentials%20not%20configured")

    try:
        user_token = facebook.exchange_code_for_token(
            site_settings.facebook_app_id,
            site_settings.facebook_app_secret,
            code,
            _callback_uri(request),
        )
        pages = facebook.get_user_pages(user_token)
    except facebook.FacebookError as e:
        return _admin_redirect(f"error={quote(str(e))}")

    if not pages:
        return _admin_redirect("error=No%20Facebook%20pages%20found")

    page = pages[0]
    SiteSettings.update(
        facebook_page_id=page['id'],
        facebook_page_access_token=page['access_token'],
        facebook_page_name=page.get('name'),
        facebook_connected=True,
        facebook_auto_post=False,
        facebook_connected_at=timezone.now(),
    )
    logger.info(f"Facebook page connected: {page.get('name')} ({page['id']})")
    return _admin_redirect("success=connected")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def disconnect(request):
    site_settings = SiteSettings.load()
    if site_settings.facebook_page_access_token:
        facebook.revoke_permissions(site_settings.facebook_page_access_token)

    SiteSettings.update(
        facebook_page_id=None,
        facebook_page_access_token=None,
        facebook_page_name=None,
        facebook_connected=False,
        facebook_auto_post=False,
        facebook_connected_at=None,
    )
    return Response({'message': 'Facebook disconnected'})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def toggle_auto_post(request):
    site_settings = SiteSettings.load()
    enabled = not site_settings.facebook_auto_post
    SiteSettings.update(facebook_auto_post=enabled)
    return Response({'auto_post': enabled, 'message': f"Auto-post {'enabled' if enabled else 'disabled'}"})
