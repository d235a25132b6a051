"""
Runtime configuration for the newsdesk backend.

Loaded once from the environment when settings are imported and exposed as
``settings.NEWSDESK``. Components that need admin credentials, the public site
URL or the ads default read it from there instead of calling ``os.getenv``.
"""
import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in ('true', '1', 'yes', 'on')


@dataclass(frozen=True)
class NewsdeskConfig:
    site_url: str
    admin_email: str
    admin_password: str
    ads_enabled: bool
    facebook_graph_version: str
    facebook_hashtag: str

    @classmethod
    def from_env(cls) -> 'NewsdeskConfig':
        return cls(
            site_url=os.getenv('SITE_URL', 'http://localhost:3000').rstrip('/'),
            admin_email=os.getenv('ADMIN_EMAIL', '').strip().lower(),
            admin_password=os.getenv('ADMIN_PASSWORD', ''),
            ads_enabled=_env_bool('ADS_ENABLED', True),
            facebook_graph_version=os.getenv('FACEBOOK_GRAPH_VERSION', 'v18.0'),
            facebook_hashtag=os.getenv('FACEBOOK_HASHTAG', 'news'),
        )

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_email and len(self.admin_password) >= 8)

    def absolute_url(self, path: str) -> str:
        """Join the public site URL with an absolute path like ``/news/foo``."""
        if not path.startswith('/'):
            path = '/' + path
        return f"{self.site_url}{path}"
