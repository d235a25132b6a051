"""
Published-post listings for the public site: home page blocks, latest news,
and the category / district / upazila / tag pages.

Every paginated listing returns the same dict shape:
``{'items', 'total', 'page', 'pages'}`` plus the resolved taxonomy record,
or ``None`` when the requested taxonomy slug does not exist.
"""
from django.db.models import Prefetch

from taxonomy.models import Category, District, Division, Upazila

from .models import Post
from .paths import category_path, district_path, post_path, tag_path, upazila_path
from .search import normalize_page, total_pages_for

LISTING_PAGE_SIZE = 10
LATEST_PAGE_SIZE = 12


def _paginate(queryset, page, page_size):
    page = normalize_page(page)
    total = queryset.count()
    start = (page - 1) * page_size
    items = list(queryset.order_by('-published_at', '-id').with_relations()[start:start + page_size])
    return {
        'items': items,
        'total': total,
        'page': page,
        'pages': total_pages_for(total, page_size),
    }


def division_tree():
    """Divisions with their districts and upazilas, all ordered by name."""
    upazilas = Upazila.objects.order_by('name')
    districts = District.objects.order_by('name').prefetch_related(Prefetch('upazilas', queryset=upazilas))
    return list(
        Division.objects.order_by('name').prefetch_related(Prefetch('districts', queryset=districts))
    )


def trending_tags(limit=16, scan=50):
    """Distinct tags of the most recent published posts, newest first."""
    recent = Post.objects.published().order_by('-published_at', '-id').prefetch_related('tags')[:scan]
    seen = []
    for post in recent:
        for name in post.tag_names():
            if name not in seen:
                seen.append(name)
                if len(seen) >= limit:
                    return seen
    return seen


def get_home_data():
    published = Post.objects.published().order_by('-published_at', '-id').with_relations()
    return {
        'breaking': list(published[:8]),
        'featured': list(published.filter(featured=True)[:6]),
        'latest': list(published[:12]),
        'categories': list(Category.objects.order_by('-created_at')[:6]),
        'divisions': division_tree(),
        'trending_tags': trending_tags(),
    }


def get_sidebar_data():
    return {
        'categories': list(Category.objects.order_by('-created_at')[:8]),
        'divisions': division_tree(),
    }


def get_latest_news(page=1, page_size=LATEST_PAGE_SIZE):
    return _paginate(Post.objects.published(), page, page_size)


def get_published_by_category(category_slug, page=1, page_size=LISTING_PAGE_SIZE):
    category = Category.objects.filter(slug=category_slug).first()
    if category is None:
        return None
    result = _paginate(Post.objects.published().filter(category=category), page, page_size)
    result['category'] = category
    return result


def get_published_by_district(district_slug, page=1, page_size=LISTING_PAGE_SIZE):
    district = District.objects.filter(slug=district_slug).first()
    if district is None:
        return None
    result = _paginate(Post.objects.published().filter(district=district), page, page_size)
    result['district'] = district
    return result


def get_published_by_upazila(district_slug, upazila_slug, page=1, page_size=LISTING_PAGE_SIZE):
    district = District.objects.filter(slug=district_slug).first()
    if district is None:
        return None
    upazila = Upazila.objects.filter(district=district, slug=upazila_slug).first()
    if upazila is None:
        return None
    queryset = Post.objects.published().filter(district=district, upazila=upazila)
    result = _paginate(queryset, page, page_size)
    result['district'] = district
    result['upazila'] = upazila
    return result


def get_published_by_tag(tag, page=1, page_size=LISTING_PAGE_SIZE):
    name = (tag or '').strip().lower()
    result = _paginate(Post.objects.published().filter(tags__name=name), page, page_size)
    result['tag'] = name
    return result


def get_post_by_slug_or_id(identifier, include_drafts=False):
    """
    Look a post up by the identifier in its public path.

    An all-digit identifier first matches a post whose path is ``/news/<id>``
    (placeholder or blank slug), so a real slug such as ``2024`` cannot hide
    it. Otherwise the slug wins, then the numeric id.
    """
    queryset = Post.objects.with_relations()
    if not include_drafts:
        queryset = queryset.published()
    identifier = str(identifier)
    by_id = queryset.filter(pk=int(identifier)).first() if identifier.isdecimal() else None
    if by_id is not None and post_path(by_id) == f'/news/{by_id.pk}':
        return by_id
    return queryset.filter(slug=identifier).first() or by_id


def get_related_posts(post, limit=4):
    return list(
        Post.objects.published()
        .filter(category_id=post.category_id)
        .exclude(pk=post.pk)
        .order_by('-published_at', '-id')
        .with_relations()[:limit]
    )


def sitemap_entries():
    """(path, last_modified) pairs for every public page worth indexing."""
    entries = [('/', None), ('/search', None)]
    for post in Post.objects.published().only('id', 'slug', 'updated_at').order_by('-published_at'):
        entries.append((post_path(post), post.updated_at))
    for category in Category.objects.order_by('name'):
        entries.append((category_path(category), category.updated_at))
    for district in District.objects.order_by('name'):
        entries.append((district_path(district), district.updated_at))
    for upazila in Upazila.objects.select_related('district').order_by('district__name', 'name'):
        entries.append((upazila_path(upazila), upazila.updated_at))
    for name in trending_tags():
        entries.append((tag_path(name), None))
    return entries
