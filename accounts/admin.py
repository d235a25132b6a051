from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('email', 'name', 'is_staff', 'is_active', 'created_at')
    ordering = ('-created_at',)
    search_fields = ('email', 'name')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Contact', {'fields': ('name', 'phone')}),
    )
