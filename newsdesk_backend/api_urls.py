"""
API URL routing for newsdesk_backend.
All API endpoints are prefixed with /api/v1/
"""
from django.urls import path, include

from .views import health_check

urlpatterns = [
    # Health check (no auth) - GET /api/v1/health/
    path('health/', health_check),
    # Admin authentication
    path('auth/', include('accounts.urls')),
    # Site settings and the global ads switch - MUST be before the ads router
    path('', include('sites.urls')),
    path('', include('ads.urls')),
    # Categories and locations (public lists + admin CRUD)
    path('', include('taxonomy.urls')),
    # Public news pages, search and admin posts
    path('', include('news.urls')),
    # Facebook page integration
    path('admin/facebook/', include('integrations.urls')),
]
