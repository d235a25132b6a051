"""
Facebook Graph API integration

Connects a Facebook page through OAuth and cross-posts published articles to
it. App credentials and the connected page live in SiteSettings.
"""
import logging
import secrets
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

FACEBOOK_SCOPES = [
    'pages_manage_posts',
    'pages_read_engagement',
    'pages_show_list',
]

REQUEST_TIMEOUT = 15

CATEGORY_EMOJI = {
    'politics': '🏛️',
    'sports': '⚽',
    'economy': '📈',
    'education': '📚',
    'entertainment': '🎬',
    'health': '🏥',
    'technology': '💻',
    'international': '🌍',
}
DEFAULT_EMOJI = '📰'


class FacebookError(Exception):
    """A Graph API call failed or the integration is not configured."""


def graph_base_url() -> str:
    return f"https://graph.facebook.com/{settings.NEWSDESK.facebook_graph_version}"


def dialog_url() -> str:
    return f"https://www.facebook.com/{settings.NEWSDESK.facebook_graph_version}/dialog/oauth"


def _error_message(response, fallback: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return fallback
    return (payload.get('error') or {}).get('message') or fallback


def _request(method: str, url: str, fallback_error: str, **kwargs) -> Dict[str, Any]:
    try:
        response = requests.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
    except requests.RequestException as e:
        raise FacebookError(f"{fallback_error}: {e}") from e
    if response.status_code != 200:
        message = _error_message(response, fallback_error)
        logger.error(f"Graph API {method} {url} failed (HTTP {response.status_code}): {message}")
        raise FacebookError(message)
    return response.json()


def generate_state() -> str:
    return secrets.token_urlsafe(24)


def get_login_url(app_id: str, redirect_uri: str, state: str) -> str:
    """Build the OAuth dialog URL the admin is redirected to."""
    params = {
        'client_id': app_id,
        'redirect_uri': redirect_uri,
        'scope': ','.join(FACEBOOK_SCOPES),
        'response_type': 'code',
        'state': state,
    }
    return f"{dialog_url()}?{urlencode(params)}"


def exchange_code_for_token(app_id: str, app_secret: str, code: str, redirect_uri: str) -> str:
    """Exchange an authorization code for a user access token."""
    params = {
        'client_id': app_id,
        'client_secret': app_secret,
        'code': code,
        'redirect_uri': redirect_uri,
    }
    data = _request('GET', f"{graph_base_url()}/oauth/access_token", 'Failed to exchange code for token',
                    params=params)
    return data['access_token']


def get_user_pages(user_access_token: str) -> List[Dict[str, Any]]:
    """Pages the user manages, each with its own page access token."""
    params = {
        'access_token': user_access_token,
        'fields': 'id,name,category,access_token,picture{url}',
    }
    data = _request('GET', f"{graph_base_url()}/me/accounts", 'Failed to fetch pages', params=params)
    return data.get('data', [])


def post_to_page(page_id: str, page_access_token: str, message: str,
                 link: Optional[str] = None, image_url: Optional[str] = None) -> Dict[str, Any]:
    """
    Publish to a page feed. With an image the post goes to /photos with the
    message as caption; otherwise to /feed with an optional link.
    """
    if image_url:
        url = f"{graph_base_url()}/{page_id}/photos"
        payload = {'url': image_url, 'caption': message, 'access_token': page_access_token}
        if link:
            payload['link'] = link
    else:
        url = f"{graph_base_url()}/{page_id}/feed"
        payload = {'message': message, 'access_token': page_access_token}
        if link:
            payload['link'] = link
    return _request('POST', url, 'Failed to post to Facebook', data=payload)


def revoke_permissions(access_token: str) -> bool:
    """Best-effort revoke used on disconnect."""
    try:
        response = requests.delete(
            f"{graph_base_url()}/me/permissions",
            params={'access_token': access_token},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.warning(f"Facebook permission revoke failed: {e}")
        return False
    return response.status_code == 200


def category_emoji(category: str) -> str:
    return CATEGORY_EMOJI.get((category or '').lower(), DEFAULT_EMOJI)


def format_facebook_post(title: str, excerpt: str, category: str, url: str,
                         district: Optional[str] = None) -> str:
    location = f"📍 {district}" if district else ''
    category_tag = ''.join((category or 'news').lower().split())
    site_tag = settings.NEWSDESK.facebook_hashtag
    return (
        f"{category_emoji(category)} {title}\n\n"
        f"{excerpt}\n\n"
        f"{location}\n\n"
        f"📰 Read more: {url}\n\n"
        f"#{category_tag} #{site_tag} #news #bangladesh"
    )


class FacebookPublisher:
    """
    Connected-page publisher. ``available`` is the capability check callers
    branch on before sharing; ``share`` raises FacebookError when it is false.
    """

    def __init__(self, page_id=None, page_access_token=None, connected=False, auto_post=False):
        self.page_id = page_id
        self.page_access_token = page_access_token
        self.connected = connected
        self.auto_post = auto_post

    @classmethod
    def from_settings(cls, site_settings=None):
        from sites.models import SiteSettings

        site_settings = site_settings or SiteSettings.load()
        return cls(
            page_id=site_settings.facebook_page_id,
            page_access_token=site_settings.facebook_page_access_token,
            connected=site_settings.facebook_connected,
            auto_post=site_settings.facebook_auto_post,
        )

    @property
    def available(self) -> bool:
        return bool(self.connected and self.page_id and self.page_access_token)

    def share(self, post) -> Dict[str, Any]:
        from news.paths import post_path

        if not self.available:
            raise FacebookError('Facebook not connected')

        url = settings.NEWSDESK.absolute_url(post_path(post))
        message = format_facebook_post(
            post.title,
            post.excerpt,
            post.category.name if post.category_id else 'News',
            url,
            post.district.name if post.district_id else None,
        )
        result = post_to_page(self.page_id, self.page_access_token, message, link=url,
                              image_url=post.image_url or None)
        logger.info(f"Shared post {post.pk} to Facebook page {self.page_id}: {result.get('id')}")
        return result
