"""
URL routing for ads.
Mounted at /api/v1/ in api_urls.py.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdViewSet, active_ad

router = DefaultRouter()
router.register(r'admin/ads', AdViewSet, basename='ad')

urlpatterns = [
    path('ads/active/<str:placement>/', active_ad, name='ad-active'),
    path('', include(router.urls)),
]
