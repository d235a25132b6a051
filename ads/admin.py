from django.contrib import admin
from .models import Ad


@admin.register(Ad)
class AdAdmin(admin.ModelAdmin):
    list_display = ('title', 'placement', 'is_active', 'created_at')
    list_filter = ('placement', 'is_active')
    search_fields = ('title', 'target_url')
    readonly_fields = ('created_at', 'updated_at')
