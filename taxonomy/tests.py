"""
Tests for categories and the location hierarchy.
"""
import pytest
from django.contrib.auth import get_user_model
from django.db.models import ProtectedError
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from news.models import Post
from .models import Category, Division, District, Upazila
from .services import TaxonomyInUseError, delete_taxonomy, save_taxonomy


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def authenticated_client(api_client):
    user = get_user_model().objects.create_user(
        email='admin@example.com', username='admin@example.com', password='testpass123', is_staff=True
    )
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
    return api_client


@pytest.fixture
def division():
    return save_taxonomy(Division(), 'Dhaka')


@pytest.fixture
def district(division):
    return save_taxonomy(District(division=division), 'Dhaka')


@pytest.fixture
def category():
    return save_taxonomy(Category(), 'Politics')


def _post(category, district, title):
    return Post.objects.create(
        title=title,
        slug=title.lower().replace(' ', '-'),
        excerpt='An excerpt long enough to pass.',
        body='Body text ' * 10,
        image_url='https://cdn.example.com/a.jpg',
        image_public_id='news/a',
        category=category,
        district=district,
        author='Staff Reporter',
        meta_title='Meta title here',
        meta_description='Meta description long enough',
    )


@pytest.mark.django_db
class TestSaveTaxonomy:

    def test_slug_from_name(self):
        category = save_taxonomy(Category(), 'Local Government')
        assert category.slug == 'local-government'

    def test_duplicate_names_get_suffixes(self):
        first = save_taxonomy(Category(), 'Sports')
        second = save_taxonomy(Category(), 'Sports')
        assert first.slug == 'sports'
        assert second.slug == 'sports-2'

    def test_slugs_are_unique_per_model_only(self):
        category = save_taxonomy(Category(), 'Dhaka')
        district = save_taxonomy(District(), 'Dhaka')
        assert category.slug == district.slug == 'dhaka'

    def test_save_without_rename_keeps_slug(self):
        save_taxonomy(Category(), 'Sports')
        second = save_taxonomy(Category(), 'Sports')
        save_taxonomy(second, 'Sports')
        second.refresh_from_db()
        assert second.slug == 'sports-2'

    def test_rename_resolves_new_slug(self, category):
        save_taxonomy(category, 'National Politics')
        category.refresh_from_db()
        assert category.slug == 'national-politics'

    def test_explicit_slug_source(self):
        category = save_taxonomy(Category(), 'Science & Technology', slug_source='Tech')
        assert category.slug == 'tech'


@pytest.mark.django_db
class TestDeleteTaxonomy:

    def test_district_with_posts_is_blocked(self, category, district):
        _post(category, district, 'Flood Update')
        _post(category, district, 'River Erosion')

        with pytest.raises(TaxonomyInUseError) as exc_info:
            delete_taxonomy(district)

        assert str(exc_info.value) == 'Cannot delete: District has 2 posts'
        assert District.objects.filter(pk=district.pk).exists()

    def test_district_with_upazilas_is_blocked(self, district):
        save_taxonomy(Upazila(district=district), 'Savar')
        with pytest.raises(TaxonomyInUseError) as exc_info:
            delete_taxonomy(district)
        assert exc_info.value.label == 'upazilas'
        assert exc_info.value.count == 1

    def test_division_with_districts_is_blocked(self, division, district):
        with pytest.raises(TaxonomyInUseError):
            delete_taxonomy(division)

    def test_unused_record_is_deleted(self, category):
        delete_taxonomy(category)
        assert not Category.objects.filter(pk=category.pk).exists()

    def test_store_refuses_direct_delete(self, category, district):
        _post(category, district, 'Flood Update')
        with pytest.raises(ProtectedError):
            category.delete()


@pytest.mark.django_db
class TestTaxonomyAPI:

    def test_create_category(self, authenticated_client):
        response = authenticated_client.post('/api/v1/admin/categories/', {'name': 'Health'})
        assert response.status_code == 201
        assert response.data['slug'] == 'health'

    def test_create_duplicate_category_gets_suffix(self, authenticated_client, category):
        response = authenticated_client.post('/api/v1/admin/categories/', {'name': 'Politics'})
        assert response.status_code == 201
        assert response.data['slug'] == 'politics-2'

    def test_name_too_short(self, authenticated_client):
        response = authenticated_client.post('/api/v1/admin/categories/', {'name': 'A'})
        assert response.status_code == 400
        assert 'name' in response.data

    def test_requires_authentication(self, api_client):
        response = api_client.post('/api/v1/admin/categories/', {'name': 'Health'})
        assert response.status_code == 401

    def test_rename_updates_slug(self, authenticated_client, category):
        response = authenticated_client.patch(
            f'/api/v1/admin/categories/{category.id}/', {'name': 'Elections'}
        )
        assert response.status_code == 200
        assert response.data['slug'] == 'elections'

    def test_create_upazila_under_district(self, authenticated_client, district):
        response = authenticated_client.post(
            '/api/v1/admin/upazilas/', {'name': 'Savar', 'district': district.id}
        )
        assert response.status_code == 201
        assert response.data['district_name'] == 'Dhaka'

    def test_upazila_requires_district(self, authenticated_client):
        response = authenticated_client.post('/api/v1/admin/upazilas/', {'name': 'Savar'})
        assert response.status_code == 400

    def test_delete_district_in_use(self, authenticated_client, category, district):
        _post(category, district, 'Flood Update')
        _post(category, district, 'River Erosion')

        response = authenticated_client.delete(f'/api/v1/admin/districts/{district.id}/')

        assert response.status_code == 400
        assert response.data == {'error': 'Cannot delete: District has 2 posts'}

    def test_delete_unused_district(self, authenticated_client, district):
        response = authenticated_client.delete(f'/api/v1/admin/districts/{district.id}/')
        assert response.status_code == 204

    def test_districts_filtered_by_division(self, authenticated_client, district):
        other = save_taxonomy(Division(), 'Chattogram')
        save_taxonomy(District(division=other), 'Cumilla')
        response = authenticated_client.get(f'/api/v1/admin/districts/?division={district.division_id}')
        assert [item['name'] for item in response.data] == ['Dhaka']


@pytest.mark.django_db
class TestPublicTaxonomy:

    def test_categories(self, api_client, category):
        response = api_client.get('/api/v1/categories/')
        assert response.status_code == 200
        assert response.data[0]['slug'] == 'politics'

    def test_division_tree(self, api_client, district):
        save_taxonomy(Upazila(district=district), 'Savar')
        response = api_client.get('/api/v1/divisions/')
        assert response.status_code == 200
        tree = response.data[0]
        assert tree['name'] == 'Dhaka'
        assert tree['districts'][0]['upazilas'][0]['slug'] == 'savar'
