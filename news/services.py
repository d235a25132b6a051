"""
Post create/update/delete flows used by the admin API.
"""
import logging
import re

from django.db import transaction

from .models import Post, Tag
from .slugs import save_with_unique_slug

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 160
EXCERPT_MIN_LENGTH = 20


def normalize_tags(raw):
    """Accept a comma-separated string or a list; return unique lowercase names in order."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(',')
    names = []
    for value in raw:
        name = str(value).strip().lower()
        if name and name not in names:
            names.append(name)
    return names


def derive_excerpt(body):
    """Plain-text excerpt from the start of a markdown body."""
    plain = re.sub(r'[#*`]', '', body or '')
    excerpt = plain[:EXCERPT_LENGTH].strip()
    if len(excerpt) < EXCERPT_MIN_LENGTH:
        excerpt = plain[:50].ljust(EXCERPT_MIN_LENGTH, '.')
    return excerpt


def _set_tags(post, names):
    tags = [Tag.objects.get_or_create(name=name)[0] for name in names]
    post.tags.set(tags)


def _apply_fields(post, data):
    tag_names = data.pop('tags', None)
    status = data.pop('status', None)
    for key, value in data.items():
        setattr(post, key, value)
    if status is not None:
        post.apply_status(status)
    return tag_names


def create_post(data):
    """
    Create a post from validated data. The slug comes from the title; a
    published post is offered to the Facebook auto-share hook afterwards.
    """
    data = dict(data)
    post = Post()
    tag_names = _apply_fields(post, data)

    save_with_unique_slug(
        post,
        post.title,
        after_save=lambda saved: _set_tags(saved, tag_names or []),
    )
    logger.info(f"Created post {post.pk} with slug '{post.slug}' ({post.status})")

    if post.is_published:
        auto_share(post)
    return post


def update_post(post, data):
    """
    Update a post. The slug is re-resolved only when the title changes, so a
    post keeps its public path across edits.
    """
    data = dict(data)
    old_title = post.title
    was_published = post.is_published
    tag_names = _apply_fields(post, data)

    def _after_save(saved):
        if tag_names is not None:
            _set_tags(saved, tag_names)

    if post.title != old_title or not post.slug:
        save_with_unique_slug(post, post.title, after_save=_after_save)
        logger.info(f"Post {post.pk} retitled; slug is now '{post.slug}'")
    else:
        with transaction.atomic():
            post.save()
            _after_save(post)

    if post.is_published and not was_published:
        auto_share(post)
    return post


def delete_post(post):
    image_public_id = post.image_public_id
    post_id = post.pk
    post.delete()
    logger.info(f"Deleted post {post_id} (image {image_public_id or 'none'})")
    return image_public_id


def auto_share(post):
    """
    Share a freshly published post to the connected Facebook page when
    auto-post is on. Failures are logged and never undo the post write.
    """
    from integrations.facebook import FacebookError, FacebookPublisher

    publisher = FacebookPublisher.from_settings()
    if not (publisher.available and publisher.auto_post):
        return None
    try:
        return publisher.share(post)
    except FacebookError as e:
        logger.error(f"Failed to auto-share post {post.pk} to Facebook: {e}")
        return None
