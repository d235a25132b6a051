"""
URL routing for public news pages and admin posts.
Mounted at /api/v1/ in api_urls.py.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'admin/posts', views.PostViewSet, basename='post')

urlpatterns = [
    path('home/', views.home, name='home'),
    path('news/', views.latest_news, name='news-latest'),
    path('news/<str:identifier>/', views.news_detail, name='news-detail'),
    path('search/', views.search, name='search'),
    path('categories/<str:slug>/posts/', views.category_posts, name='category-posts'),
    path('districts/<str:slug>/posts/', views.district_posts, name='district-posts'),
    path('districts/<str:slug>/<str:upazila_slug>/posts/', views.upazila_posts, name='upazila-posts'),
    path('tags/<str:tag>/posts/', views.tag_posts, name='tag-posts'),
    path('sitemap/', views.sitemap, name='sitemap'),
    path('', include(router.urls)),
]
