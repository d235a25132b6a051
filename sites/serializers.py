"""
Serializers for site settings.
"""
from rest_framework import serializers
from .models import SiteSettings


class PublicSiteSettingsSerializer(serializers.ModelSerializer):
    """Branding and contact details safe to expose on the public site."""

    class Meta:
        model = SiteSettings
        fields = (
            'logo_url', 'icon_url', 'favicon_url',
            'contact_address', 'contact_phone', 'contact_email',
            'ads_enabled',
        )


class SiteSettingsSerializer(serializers.ModelSerializer):
    """Admin view of settings. Facebook secrets are never echoed back."""
    facebook_configured = serializers.SerializerMethodField()

    class Meta:
        model = SiteSettings
        fields = (
            'logo_url', 'logo_public_id', 'icon_url', 'icon_public_id',
            'favicon_url', 'favicon_public_id',
            'contact_address', 'contact_phone', 'contact_email',
            'ads_enabled',
            'facebook_app_id', 'facebook_configured', 'facebook_connected',
            'facebook_page_id', 'facebook_page_name', 'facebook_auto_post',
            'facebook_connected_at', 'updated_at',
        )
        read_only_fields = (
            'ads_enabled', 'facebook_app_id', 'facebook_configured', 'facebook_connected',
            'facebook_page_id', 'facebook_page_name', 'facebook_auto_post',
            'facebook_connected_at', 'updated_at',
        )

    def get_facebook_configured(self, obj):
        return bool(obj.facebook_app_id and obj.facebook_app_secret)

    def validate(self, attrs):
        # Blank strings from the admin form clear the field
        return {key: (value.strip() or None) if isinstance(value, str) else value
                for key, value in attrs.items()}
