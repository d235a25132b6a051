"""
Canonical public paths for content records.
"""
from .slugs import is_placeholder_slug


def post_path(post):
    """
    ``/news/<slug>`` for a post with a real slug, ``/news/<id>`` when the slug
    is blank or the placeholder, and ``/news`` when neither is known.

    Accepts a Post or any mapping with ``id``/``slug`` keys.
    """
    if isinstance(post, dict):
        slug, post_id = post.get('slug'), post.get('id')
    else:
        slug, post_id = getattr(post, 'slug', None), getattr(post, 'pk', None)

    slug = (slug or '').strip()
    if slug and not is_placeholder_slug(slug):
        return f"/news/{slug}"

    post_id = str(post_id).strip() if post_id is not None else ''
    if post_id:
        return f"/news/{post_id}"
    return "/news"


def category_path(category):
    return f"/category/{category.slug}"


def district_path(district):
    return f"/district/{district.slug}"


def upazila_path(upazila):
    return f"/district/{upazila.district.slug}/{upazila.slug}"


def tag_path(tag_name):
    return f"/tag/{tag_name}"
