"""
Tests for posts: slug resolution, search, listings and the post API.
"""
import dataclasses
import logging
from datetime import timedelta
from io import StringIO
from types import SimpleNamespace
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError, IntegrityError
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from taxonomy.models import Category, Division, District, Upazila
from taxonomy.services import save_taxonomy
from .models import Post
from .paths import post_path
from .search import (
    MAX_PAGE,
    PAGE_SIZE,
    FallbackStrategy,
    RankedStrategy,
    SearchEngine,
    SearchIndexMissing,
    SearchQuery,
    SearchResult,
    search,
    should_fallback,
    total_pages_for,
)
from .services import create_post, derive_excerpt, normalize_tags, update_post
from .slugs import (
    PLACEHOLDER_SLUG,
    SlugConflictError,
    make_slug,
    resolve_unique_slug,
    save_with_unique_slug,
)

BODY = 'Heavy rain caused the river to overflow into several villages overnight. ' * 2


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
def taxonomy():
    category = save_taxonomy(Category(), 'Politics')
    division = save_taxonomy(Division(), 'Dhaka')
    district = save_taxonomy(District(division=division), 'Dhaka')
    upazila = save_taxonomy(Upazila(district=district), 'Savar')
    return SimpleNamespace(category=category, division=division, district=district, upazila=upazila)


@pytest.fixture
def make_post(taxonomy):
    def _make_post(title='Flood Update', status=Post.STATUS_PUBLISHED, tags=None, **fields):
        data = {
            'title': title,
            'excerpt': 'Rivers rose across the district overnight.',
            'body': BODY,
            'image_url': 'https://cdn.example.com/flood.jpg',
            'image_public_id': 'news/flood',
            'category': taxonomy.category,
            'district': taxonomy.district,
            'author': 'Staff Reporter',
            'meta_title': 'Flood update for Dhaka',
            'meta_description': 'Latest flood situation across Dhaka district.',
            'status': status,
            'tags': tags or [],
        }
        data.update(fields)
        return create_post(data)
    return _make_post


def _set_published_at(post, when):
    Post.objects.filter(pk=post.pk).update(published_at=when)
    post.refresh_from_db()
    return post


class TestMakeSlug:

    def test_hyphenates_and_lowercases(self):
        assert make_slug('Flood Update') == 'flood-update'

    def test_punctuation_becomes_separator(self):
        assert make_slug('Dhaka: Roads, Rails & Rivers!') == 'dhaka-roads-rails-rivers'

    def test_folds_accents(self):
        assert make_slug('Café au lait') == 'cafe-au-lait'

    def test_non_ascii_title_is_empty(self):
        assert make_slug('বন্যা পরিস্থিতি') == ''

    def test_strips_edge_hyphens(self):
        assert make_slug('  --Breaking--  ') == 'breaking'


class TestPostPath:

    def test_real_slug(self):
        assert post_path({'id': 7, 'slug': 'flood-update'}) == '/news/flood-update'

    def test_placeholder_slug_uses_id(self):
        assert post_path({'id': 7, 'slug': PLACEHOLDER_SLUG}) == '/news/7'

    def test_placeholder_is_case_insensitive(self):
        assert post_path({'id': 7, 'slug': 'POST'}) == '/news/7'

    def test_blank_slug_uses_id(self):
        assert post_path({'id': 7, 'slug': '  '}) == '/news/7'

    def test_neither_slug_nor_id(self):
        assert post_path({'id': None, 'slug': ''}) == '/news'

    def test_suffixed_placeholder_is_a_real_slug(self):
        assert post_path({'id': 7, 'slug': 'post-2'}) == '/news/post-2'


class TestSearchHelpers:

    def test_should_fallback_only_for_missing_index(self):
        assert should_fallback(SearchIndexMissing('gone'))
        assert not should_fallback(DatabaseError('connection refused'))
        assert not should_fallback(ValueError('bad'))

    @pytest.mark.parametrize('raw, expected', [
        (None, 1), ('', 1), ('abc', 1), ('0', 1), ('-3', 1), ('2', 2), (' 4 ', 4), (5, 5),
        ('99999999999999999999', MAX_PAGE),
    ])
    def test_page_normalization(self, raw, expected):
        assert SearchQuery.from_params('flood', raw).page == expected

    @pytest.mark.parametrize('total, pages', [(0, 1), (1, 1), (10, 1), (11, 2), (25, 3)])
    def test_total_pages(self, total, pages):
        assert total_pages_for(total, 10) == pages

    def test_normalize_tags(self):
        assert normalize_tags(' Flood, RAIN ,flood,, ') == ['flood', 'rain']
        assert normalize_tags(['Dhaka', 'dhaka', 'Savar']) == ['dhaka', 'savar']

    def test_derive_excerpt_strips_markdown(self):
        excerpt = derive_excerpt('# Heading\n\n**Bold** text ' + 'word ' * 60)
        assert '#' not in excerpt and '*' not in excerpt
        assert 20 <= len(excerpt) <= 160


@pytest.mark.django_db
class TestSlugResolution:

    def test_flood_update_sequence(self, make_post):
        slugs = [make_post('Flood Update').slug for _ in range(3)]
        assert slugs == ['flood-update', 'flood-update-2', 'flood-update-3']

    def test_slugs_are_unique(self, make_post):
        for _ in range(5):
            make_post('Flood Update')
        slugs = list(Post.objects.values_list('slug', flat=True))
        assert len(slugs) == len(set(slugs))

    def test_stable_on_self_update(self, make_post):
        post = make_post('Flood Update')
        make_post('Flood Update')
        assert resolve_unique_slug('Flood Update', exclude_id=post.pk) == 'flood-update'

    def test_deterministic_without_writes(self, make_post):
        make_post('Flood Update')
        assert resolve_unique_slug('Flood Update') == resolve_unique_slug('Flood Update') == 'flood-update-2'

    def test_placeholder_lineage(self, make_post):
        first = make_post('বন্যা পরিস্থিতি')
        second = make_post('!!!???')
        assert first.slug == 'post'
        assert second.slug == 'post-2'
        assert post_path(first) == f'/news/{first.pk}'

    def test_update_without_title_change_keeps_slug(self, make_post):
        post = make_post('Flood Update')
        update_post(post, {'excerpt': 'A completely new excerpt for the story.'})
        post.refresh_from_db()
        assert post.slug == 'flood-update'

    def test_retitle_resolves_new_slug(self, make_post):
        post = make_post('Flood Update')
        update_post(post, {'title': 'River Erosion'})
        post.refresh_from_db()
        assert post.slug == 'river-erosion'

    def test_concurrent_insert_is_retried(self, make_post):
        make_post('Flood Update')
        post = Post.objects.first()
        clone = Post(**{f.attname: getattr(post, f.attname) for f in Post._meta.concrete_fields if not f.primary_key})

        # The first resolve returns a slug another writer has just taken
        with mock.patch('news.slugs.resolve_unique_slug', side_effect=['flood-update', 'flood-update-2']):
            save_with_unique_slug(clone, clone.title)

        assert clone.pk is not None
        assert clone.slug == 'flood-update-2'

    def test_retry_exhaustion_raises_conflict(self, make_post):
        post = make_post('Flood Update')
        clone = Post(**{f.attname: getattr(post, f.attname) for f in Post._meta.concrete_fields if not f.primary_key})

        with mock.patch('news.slugs.resolve_unique_slug', return_value='flood-update'):
            with pytest.raises(SlugConflictError):
                save_with_unique_slug(clone, clone.title)

        assert Post.objects.count() == 1

    def test_other_integrity_errors_propagate(self):
        with mock.patch.object(Category, 'save', side_effect=IntegrityError('not null')):
            with pytest.raises(IntegrityError):
                save_with_unique_slug(Category(name='Health'), 'Health')


@pytest.mark.django_db
class TestPostLifecycle:

    def test_publish_stamps_published_at(self, make_post):
        post = make_post(status=Post.STATUS_DRAFT)
        assert post.published_at is None
        update_post(post, {'status': Post.STATUS_PUBLISHED})
        assert post.published_at is not None

    def test_republish_keeps_original_timestamp(self, make_post):
        post = make_post()
        stamped = post.published_at
        update_post(post, {'status': Post.STATUS_PUBLISHED, 'featured': True})
        assert post.published_at == stamped

    def test_unpublish_clears_published_at(self, make_post):
        post = make_post()
        update_post(post, {'status': Post.STATUS_DRAFT})
        assert post.published_at is None

    def test_tags_are_stored_lowercase(self, make_post):
        post = make_post(tags=normalize_tags('Flood, Rain'))
        assert sorted(post.tag_names()) == ['flood', 'rain']


@pytest.mark.django_db
class TestSearch:

    def test_empty_query_touches_no_store(self, django_assert_num_queries):
        with django_assert_num_queries(0):
            result = search('   ', page=4)
        assert result == SearchResult(page=1, total_pages=1, total_count=0, items=[], resolved_query='')

    def test_empty_query_skips_strategies(self):
        ranked, fallback = mock.Mock(), mock.Mock()
        result = SearchEngine(ranked=ranked, fallback=fallback).search('', 1)
        ranked.run.assert_not_called()
        fallback.run.assert_not_called()
        assert result.total_count == 0

    def test_sqlite_uses_fallback(self, make_post, caplog):
        make_post('Flood Update')
        with caplog.at_level(logging.WARNING, logger='news.search'):
            result = search('flood')
        assert result.total_count == 1
        assert result.resolved_query == 'flood'
        assert any('degraded' in record.message for record in caplog.records)

    def test_ranked_strategy_reports_missing_index(self):
        with pytest.raises(SearchIndexMissing):
            RankedStrategy().run(SearchQuery('flood'), PAGE_SIZE)

    def test_fallback_matches_title_body_and_tags_case_insensitively(self, make_post):
        make_post('Flood Update')
        make_post('Cricket Final', body='The national team won the final. ' * 3)
        make_post('Budget Session', tags=['economy'])

        assert search('FLOOD').total_count == 1
        assert search('national team').total_count == 1
        assert search('Economy').total_count == 1
        assert search('nothing matches this').total_count == 0

    def test_fallback_excludes_drafts(self, make_post):
        make_post('Flood Update', status=Post.STATUS_DRAFT)
        assert search('flood').total_count == 0

    def test_fallback_counts_tag_and_text_match_once(self, make_post):
        make_post('Flood Update', tags=['flood'])
        result = search('flood')
        assert result.total_count == 1
        assert len(result.items) == 1

    def test_fallback_orders_by_recency(self, make_post):
        now = timezone.now()
        older = _set_published_at(make_post('Flood Update'), now - timedelta(days=2))
        newer = _set_published_at(make_post('Flood Update'), now - timedelta(hours=1))
        assert [post.pk for post in search('flood').items] == [newer.pk, older.pk]

    def test_pagination_invariant(self, make_post):
        for _ in range(PAGE_SIZE + 3):
            make_post('Flood Update')

        first = search('flood', 1)
        second = search('flood', 2)
        beyond = search('flood', 9)

        assert first.total_count == PAGE_SIZE + 3
        assert first.total_pages == 2
        assert len(first.items) == PAGE_SIZE
        assert len(second.items) == 3
        assert beyond.page == 9
        assert beyond.items == []
        assert {p.pk for p in first.items}.isdisjoint({p.pk for p in second.items})

    def test_huge_page_is_capped(self, make_post):
        make_post('Flood Update')
        result = search('flood', '99999999999999999999')
        assert result.page == MAX_PAGE
        assert result.total_count == 1
        assert result.items == []

    def test_ranked_orders_by_relevance_then_recency(self):
        matches, ordered = RankedStrategy().querysets(SearchQuery('flood'))
        assert ordered.query.order_by == ('-rank', '-published_at', '-id')
        assert 'rank' in ordered.query.annotations
        assert 'rank' not in matches.query.annotations

    def test_ranked_counts_matches_and_slices_page(self):
        strategy = RankedStrategy()
        matches, ordered = mock.MagicMock(), mock.MagicMock()
        matches.count.return_value = 25
        ordered.__getitem__.return_value = ['third-page-post']

        with mock.patch.object(strategy, 'index_available', return_value=True), \
                mock.patch.object(strategy, 'querysets', return_value=(matches, ordered)):
            items, total = strategy.run(SearchQuery('flood', 3), PAGE_SIZE)

        assert total == 25
        assert items == ['third-page-post']
        ordered.__getitem__.assert_called_once_with(slice(20, 30))

    def test_fallback_shape_equals_ranked_shape(self, make_post):
        for _ in range(3):
            make_post('Flood Update')
        fallback = FallbackStrategy()

        class FakeRanked:
            def run(self, query, page_size):
                items, total = fallback.run(query, page_size)
                return list(reversed(items)), total

        class MissingIndex:
            def run(self, query, page_size):
                raise SearchIndexMissing('news_post_search_idx does not exist')

        ranked_result = SearchEngine(ranked=FakeRanked()).search('flood', 1)
        fallback_result = SearchEngine(ranked=MissingIndex()).search('flood', 1)

        assert [f.name for f in dataclasses.fields(ranked_result)] == [f.name for f in dataclasses.fields(fallback_result)]
        assert ranked_result.page == fallback_result.page
        assert ranked_result.total_pages == fallback_result.total_pages
        assert ranked_result.total_count == fallback_result.total_count
        assert {p.pk for p in ranked_result.items} == {p.pk for p in fallback_result.items}

    def test_other_errors_propagate(self):
        ranked = mock.Mock()
        ranked.run.side_effect = DatabaseError('connection refused')
        fallback = mock.Mock()

        with pytest.raises(DatabaseError):
            SearchEngine(ranked=ranked, fallback=fallback).search('flood', 1)
        fallback.run.assert_not_called()


@pytest.mark.django_db
class TestListingsAPI:

    def test_home(self, api_client, make_post):
        make_post('Flood Update', featured=True, tags=['flood'])
        response = api_client.get('/api/v1/home/')
        assert response.status_code == 200
        assert len(response.data['featured']) == 1
        assert response.data['trending_tags'] == ['flood']
        assert response.data['divisions'][0]['districts'][0]['slug'] == 'dhaka'

    def test_latest_news_excludes_drafts(self, api_client, make_post):
        make_post('Flood Update')
        make_post('Draft Story', status=Post.STATUS_DRAFT)
        response = api_client.get('/api/v1/news/')
        assert response.data['total'] == 1
        assert response.data['pages'] == 1

    def test_detail_by_slug(self, api_client, make_post):
        post = make_post('Flood Update')
        response = api_client.get('/api/v1/news/flood-update/')
        assert response.status_code == 200
        assert response.data['post']['id'] == post.pk
        assert response.data['post']['path'] == '/news/flood-update'

    def test_detail_by_id_for_placeholder(self, api_client, make_post):
        post = make_post('বন্যা পরিস্থিতি')
        response = api_client.get(f'/api/v1/news/{post.pk}/')
        assert response.status_code == 200
        assert response.data['post']['path'] == f'/news/{post.pk}'

    def test_numeric_slug_does_not_hide_placeholder_post(self, api_client, make_post):
        placeholder = make_post('বন্যা পরিস্থিতি')
        numeric = make_post('Flood Update')
        Post.objects.filter(pk=numeric.pk).update(slug=str(placeholder.pk))

        response = api_client.get(f'/api/v1/news/{placeholder.pk}/')
        assert response.data['post']['id'] == placeholder.pk

    def test_numeric_slug_is_still_reachable(self, api_client, make_post):
        numeric = make_post('Flood Update')
        Post.objects.filter(pk=numeric.pk).update(slug='2024')

        response = api_client.get('/api/v1/news/2024/')
        assert response.status_code == 200
        assert response.data['post']['id'] == numeric.pk

    def test_draft_detail_is_hidden(self, api_client, make_post):
        make_post('Flood Update', status=Post.STATUS_DRAFT)
        response = api_client.get('/api/v1/news/flood-update/')
        assert response.status_code == 404

    def test_search_endpoint(self, api_client, make_post):
        make_post('Flood Update')
        response = api_client.get('/api/v1/search/', {'q': ' flood ', 'page': 'x'})
        assert response.status_code == 200
        assert response.data['query'] == 'flood'
        assert response.data['page'] == 1
        assert response.data['total_count'] == 1
        assert response.data['items'][0]['slug'] == 'flood-update'

    def test_search_endpoint_huge_page(self, api_client, make_post):
        make_post('Flood Update')
        response = api_client.get('/api/v1/search/', {'q': 'flood', 'page': '99999999999999999999'})
        assert response.status_code == 200
        assert response.data['page'] == MAX_PAGE
        assert response.data['items'] == []

    def test_latest_news_huge_page(self, api_client, make_post):
        make_post('Flood Update')
        response = api_client.get('/api/v1/news/', {'page': '99999999999999999999'})
        assert response.status_code == 200
        assert response.data['page'] == MAX_PAGE

    def test_search_endpoint_empty_query(self, api_client):
        response = api_client.get('/api/v1/search/')
        assert response.data == {'query': '', 'page': 1, 'total_pages': 1, 'total_count': 0, 'items': []}

    def test_category_posts(self, api_client, make_post):
        make_post('Flood Update')
        response = api_client.get('/api/v1/categories/politics/posts/')
        assert response.status_code == 200
        assert response.data['category']['name'] == 'Politics'
        assert response.data['total'] == 1

    def test_unknown_category(self, api_client):
        response = api_client.get('/api/v1/categories/unknown/posts/')
        assert response.status_code == 404

    def test_upazila_posts(self, api_client, make_post, taxonomy):
        make_post('Flood Update', upazila=taxonomy.upazila)
        make_post('River Erosion')
        response = api_client.get('/api/v1/districts/dhaka/savar/posts/')
        assert response.status_code == 200
        assert response.data['total'] == 1
        assert response.data['upazila']['slug'] == 'savar'

    def test_district_posts(self, api_client, make_post):
        make_post('Flood Update')
        response = api_client.get('/api/v1/districts/dhaka/posts/')
        assert response.data['total'] == 1

    def test_tag_posts(self, api_client, make_post):
        make_post('Flood Update', tags=['flood'])
        response = api_client.get('/api/v1/tags/Flood/posts/')
        assert response.data['tag'] == 'flood'
        assert response.data['total'] == 1

    def test_sitemap(self, api_client, make_post):
        make_post('Flood Update', tags=['flood'])
        response = api_client.get('/api/v1/sitemap/')
        locs = [entry['loc'] for entry in response.data['urls']]
        assert any(loc.endswith('/news/flood-update') for loc in locs)
        assert any(loc.endswith('/category/politics') for loc in locs)
        assert any(loc.endswith('/district/dhaka/savar') for loc in locs)
        assert any(loc.endswith('/tag/flood') for loc in locs)


@pytest.mark.django_db
class TestPostAdminAPI:

    def _payload(self, taxonomy, **overrides):
        payload = {
            'title': 'Flood Update',
            'body': BODY,
            'image_url': 'https://cdn.example.com/flood.jpg',
            'image_public_id': 'news/flood',
            'category': taxonomy.category.id,
            'district': taxonomy.district.id,
            'author': 'Staff Reporter',
            'meta_title': 'Flood update for Dhaka',
            'meta_description': 'Latest flood situation across Dhaka district.',
            'tags': 'Flood, Rain',
            'status': 'published',
        }
        payload.update(overrides)
        return payload

    def test_create_post(self, authenticated_client, taxonomy):
        response = authenticated_client.post('/api/v1/admin/posts/', self._payload(taxonomy), format='json')
        assert response.status_code == 201
        assert response.data['slug'] == 'flood-update'
        assert response.data['excerpt']
        assert sorted(response.data['tags']) == ['flood', 'rain']
        assert response.data['published_at'] is not None

    def test_create_same_title_twice(self, authenticated_client, taxonomy):
        authenticated_client.post('/api/v1/admin/posts/', self._payload(taxonomy), format='json')
        response = authenticated_client.post('/api/v1/admin/posts/', self._payload(taxonomy), format='json')
        assert response.data['slug'] == 'flood-update-2'

    def test_client_slug_is_ignored(self, authenticated_client, taxonomy):
        response = authenticated_client.post(
            '/api/v1/admin/posts/', self._payload(taxonomy, slug='custom'), format='json'
        )
        assert response.data['slug'] == 'flood-update'

    @pytest.mark.parametrize('field, value', [
        ('title', 'Hi'),
        ('body', 'Too short'),
        ('meta_title', 'Short'),
        ('meta_description', 'Too short'),
        ('author', 'A'),
        ('excerpt', 'Short excerpt'),
        ('tags', ','.join(f'tag{i}' for i in range(11))),
    ])
    def test_validation(self, authenticated_client, taxonomy, field, value):
        response = authenticated_client.post(
            '/api/v1/admin/posts/', self._payload(taxonomy, **{field: value}), format='json'
        )
        assert response.status_code == 400
        assert field in response.data

    def test_upazila_must_belong_to_district(self, authenticated_client, taxonomy):
        other = save_taxonomy(District(division=taxonomy.division), 'Gazipur')
        response = authenticated_client.post(
            '/api/v1/admin/posts/',
            self._payload(taxonomy, district=other.id, upazila=taxonomy.upazila.id),
            format='json',
        )
        assert response.status_code == 400
        assert 'upazila' in response.data

    def test_patch_keeps_slug(self, authenticated_client, make_post):
        post = make_post('Flood Update')
        response = authenticated_client.patch(
            f'/api/v1/admin/posts/{post.id}/', {'featured': True}, format='json'
        )
        assert response.status_code == 200
        assert response.data['slug'] == 'flood-update'

    def test_patch_title_changes_slug(self, authenticated_client, make_post):
        post = make_post('Flood Update')
        response = authenticated_client.patch(
            f'/api/v1/admin/posts/{post.id}/', {'title': 'Flood Waters Recede'}, format='json'
        )
        assert response.data['slug'] == 'flood-waters-recede'

    def test_slug_conflict_returns_409(self, authenticated_client, taxonomy):
        with mock.patch('news.views.create_post', side_effect=SlugConflictError(Post, 'flood-update')):
            response = authenticated_client.post('/api/v1/admin/posts/', self._payload(taxonomy), format='json')
        assert response.status_code == 409

    def test_delete_returns_image_public_id(self, authenticated_client, make_post):
        post = make_post('Flood Update')
        response = authenticated_client.delete(f'/api/v1/admin/posts/{post.id}/')
        assert response.status_code == 200
        assert response.data['image_public_id'] == 'news/flood'
        assert not Post.objects.filter(pk=post.pk).exists()

    def test_list_includes_drafts(self, authenticated_client, make_post):
        make_post('Flood Update', status=Post.STATUS_DRAFT)
        response = authenticated_client.get('/api/v1/admin/posts/?status=draft')
        assert response.data['count'] == 1

    def test_requires_authentication(self, api_client):
        assert api_client.get('/api/v1/admin/posts/').status_code == 401


@pytest.mark.django_db
class TestCommands:

    def test_fix_post_slugs(self, make_post):
        titled = make_post('Flood Update')
        untitled = make_post('বন্যা পরিস্থিতি')
        kept = make_post('River Erosion')
        Post.objects.filter(pk=titled.pk).update(slug='')
        call_command('fix_post_slugs', stdout=StringIO())

        titled.refresh_from_db()
        untitled.refresh_from_db()
        kept.refresh_from_db()
        assert titled.slug == 'flood-update'
        assert untitled.slug == 'post'
        assert kept.slug == 'river-erosion'

    def test_fix_post_slugs_id_fallback(self, make_post):
        post = make_post('বন্যা পরিস্থিতি')
        Post.objects.filter(pk=post.pk).update(slug='')
        call_command('fix_post_slugs', stdout=StringIO())
        post.refresh_from_db()
        assert post.slug == f'post-{str(post.pk)[-6:]}'

    def test_ensure_search_index_requires_postgres(self):
        with pytest.raises(CommandError):
            call_command('ensure_search_index', stdout=StringIO())
