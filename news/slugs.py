"""
Slug resolution for every content type with a public path.

``resolve_unique_slug`` probes the table for the candidate and appends ``-2``,
``-3``, ... until a free slug is found. The probe and the later insert are not
atomic: two writers may pick the same slug, and the unique constraint on the
column rejects the second insert. ``save_with_unique_slug`` is the caller-side
retry for that case.
"""
import logging
import re
import unicodedata

from django.db import IntegrityError, transaction

logger = logging.getLogger(__name__)

# Base used when a title has no ASCII-representable characters. URL building
# treats a stored slug equal to this literal as "no real slug".
PLACEHOLDER_SLUG = 'post'

SLUG_SAVE_ATTEMPTS = 3


class SlugConflictError(Exception):
    """A unique slug could not be stored after repeated resolve attempts."""

    def __init__(self, model, slug):
        self.model = model
        self.slug = slug
        super().__init__(
            f"Could not store a unique slug for {model.__name__} (last tried '{slug}')"
        )


def make_slug(value):
    """
    Lowercase, ASCII-fold and hyphenate ``value``.

    >>> make_slug("Hello World!")
    'hello-world'
    >>> make_slug("Café_au lait")
    'cafe-au-lait'
    """
    folded = unicodedata.normalize('NFKD', value or '')
    folded = folded.encode('ascii', 'ignore').decode('ascii').lower()
    return re.sub(r'[^a-z0-9]+', '-', folded).strip('-')


def is_placeholder_slug(slug):
    return (slug or '').strip().lower() == PLACEHOLDER_SLUG


def resolve_unique_slug(title, exclude_id=None, *, model=None):
    """
    Return a slug derived from ``title`` that no other ``model`` row uses.

    ``exclude_id`` is the primary key of the row being updated so that a row
    never collides with its own current slug. ``model`` defaults to Post.
    """
    if model is None:
        from .models import Post
        model = Post

    base = make_slug(title) or PLACEHOLDER_SLUG
    queryset = model._default_manager.all()
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)

    candidate = base
    suffix = 2
    while queryset.filter(slug=candidate).exists():
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def save_with_unique_slug(instance, source, after_save=None):
    """
    Resolve a slug for ``instance`` from ``source`` and save it.

    Each attempt runs in its own atomic block. An IntegrityError is retried
    only when the slug we tried is now taken (a concurrent writer won the
    race); any other integrity failure propagates. ``after_save`` runs inside
    the same transaction, e.g. to set many-to-many relations.
    """
    model = type(instance)
    exclude_id = instance.pk
    slug = None

    for attempt in range(1, SLUG_SAVE_ATTEMPTS + 1):
        slug = resolve_unique_slug(source, exclude_id, model=model)
        instance.slug = slug
        try:
            with transaction.atomic():
                instance.save()
                if after_save is not None:
                    after_save(instance)
            return instance
        except IntegrityError:
            taken = model._default_manager.filter(slug=slug)
            if exclude_id is not None:
                taken = taken.exclude(pk=exclude_id)
            if not taken.exists():
                raise
            if exclude_id is None:
                # A failed insert must not leave a stale pk behind
                instance.pk = None
            logger.warning(
                f"Slug '{slug}' for {model.__name__} was taken concurrently "
                f"(attempt {attempt}/{SLUG_SAVE_ATTEMPTS}); resolving again"
            )

    raise SlugConflictError(model, slug)
