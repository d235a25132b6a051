"""
URL routing for site settings.
Mounted at /api/v1/ in api_urls.py.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('site-settings/public/', views.public_site_settings, name='site-settings-public'),
    path('admin/site-settings/', views.site_settings, name='site-settings'),
    path('admin/ads/toggle-global/', views.toggle_ads_global, name='ads-toggle-global'),
]
