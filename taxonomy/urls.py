"""
URL routing for categories and locations.
Mounted at /api/v1/ in api_urls.py.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    CategoryViewSet,
    DivisionViewSet,
    DistrictViewSet,
    UpazilaViewSet,
    public_categories,
    public_divisions,
)

router = DefaultRouter()
router.register(r'admin/categories', CategoryViewSet, basename='category')
router.register(r'admin/divisions', DivisionViewSet, basename='division')
router.register(r'admin/districts', DistrictViewSet, basename='district')
router.register(r'admin/upazilas', UpazilaViewSet, basename='upazila')

urlpatterns = [
    path('categories/', public_categories, name='categories-public'),
    path('divisions/', public_divisions, name='divisions-public'),
    path('', include(router.urls)),
]
