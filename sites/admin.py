from django.contrib import admin
from .models import SiteSettings


@admin.register(SiteSettings)
class SiteSettingsAdmin(admin.ModelAdmin):
    list_display = ('key', 'ads_enabled', 'facebook_connected', 'facebook_auto_post', 'updated_at')
    readonly_fields = ('created_at', 'updated_at', 'facebook_connected_at')
    exclude = ('facebook_app_secret', 'facebook_page_access_token')
