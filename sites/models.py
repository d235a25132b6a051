"""
Site-wide settings: branding, contact details, the global ads switch and the
Facebook page connection. Stored as a single row keyed ``global``.
"""
from django.conf import settings
from django.db import models

GLOBAL_KEY = 'global'


def _default_ads_enabled():
    return settings.NEWSDESK.ads_enabled


class SiteSettings(models.Model):
    key = models.CharField(max_length=32, unique=True, default=GLOBAL_KEY)

    # Branding (image URL + CDN public id pairs)
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    logo_public_id = models.CharField(max_length=255, blank=True, null=True)
    icon_url = models.URLField(max_length=500, blank=True, null=True)
    icon_public_id = models.CharField(max_length=255, blank=True, null=True)
    favicon_url = models.URLField(max_length=500, blank=True, null=True)
    favicon_public_id = models.CharField(max_length=255, blank=True, null=True)

    # Contact details shown in the public footer
    contact_address = models.CharField(max_length=255, blank=True, null=True)
    contact_phone = models.CharField(max_length=50, blank=True, null=True)
    contact_email = models.EmailField(blank=True, null=True)

    ads_enabled = models.BooleanField(default=_default_ads_enabled)

    # Facebook app credentials and connected page
    facebook_app_id = models.CharField(max_length=64, blank=True, null=True)
    facebook_app_secret = models.CharField(max_length=255, blank=True, null=True)
    facebook_page_id = models.CharField(max_length=64, blank=True, null=True)
    facebook_page_name = models.CharField(max_length=255, blank=True, null=True)
    facebook_page_access_token = models.TextField(blank=True, null=True)
    facebook_connected = models.BooleanField(default=False)
    facebook_auto_post = models.BooleanField(default=False)
    facebook_connected_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'site_settings'
        verbose_name_plural = 'site settings'

    def __str__(self):
        return f"Site settings ({self.key})"

    @classmethod
    def load(cls):
        """Return the global settings row, creating it with defaults on first use."""
        obj, _ = cls.objects.get_or_create(key=GLOBAL_KEY)
        return obj

    @classmethod
    def update(cls, **fields):
        """Upsert the given fields on the global row and return it."""
        obj = cls.load()
        for name, value in fields.items():
            setattr(obj, name, value)
        obj.save(update_fields=list(fields) + ['updated_at'])
        return obj

    def branding_public_ids(self):
        return {
            'logo_public_id': self.logo_public_id,
            'icon_public_id': self.icon_public_id,
            'favicon_public_id': self.favicon_public_id,
        }
