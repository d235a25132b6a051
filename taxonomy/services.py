"""
Write-side operations for taxonomy records.
"""
import logging

from django.db import transaction

from news.slugs import save_with_unique_slug

logger = logging.getLogger(__name__)


class TaxonomyInUseError(Exception):
    """Raised when a taxonomy record still has dependent posts or children."""

    def __init__(self, instance, label, count):
        self.instance = instance
        self.label = label
        self.count = count
        kind = type(instance)._meta.verbose_name.title()
        super().__init__(f"Cannot delete: {kind} has {count} {label}")


def save_taxonomy(instance, name, slug_source=None):
    """
    Create or rename a taxonomy record.

    The slug is resolved from ``slug_source`` (an admin-supplied slug) or the
    name. An existing record keeps its slug unless its name changes or a new
    slug is supplied.
    """
    renamed = instance.pk is None or instance.name != name or bool(slug_source)
    instance.name = name
    if renamed or not instance.slug:
        return save_with_unique_slug(instance, slug_source or name)
    instance.save()
    return instance


def delete_taxonomy(instance):
    """
    Delete ``instance`` only if nothing references it.

    Dependents are counted first; the first non-zero relation is reported in
    the error message shown to the admin.
    """
    with transaction.atomic():
        for label, count in instance.dependent_counts().items():
            if count > 0:
                logger.info(f"Blocked delete of {type(instance).__name__} {instance.pk}: {count} {label}")
                raise TaxonomyInUseError(instance, label, count)
        instance.delete()
