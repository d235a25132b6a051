"""
URL routes for the Facebook page integration.
Mounted at /api/v1/admin/facebook/ in api_urls.py.
"""
from django.urls import path
from . import facebook_views

urlpatterns = [
    path('', facebook_views.facebook_status, name='facebook-status'),
    path('credentials/', facebook_views.save_credentials, name='facebook-credentials'),
    # OAuth flow
    path('auth-url/', facebook_views.get_auth_url, name='facebook-auth-url'),
    path('callback/', facebook_views.oauth_callback, name='facebook-callback'),
    path('disconnect/', facebook_views.disconnect, name='facebook-disconnect'),
    path('auto-post/', facebook_views.toggle_auto_post, name='facebook-auto-post'),
]
