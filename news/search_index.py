"""
Full-text index over posts (PostgreSQL only).

The ranked search strategy only runs when this index exists. Creating it is a
deployment step (the 0002 migration on PostgreSQL, or
``manage.py ensure_search_index``); until then search serves results through
the substring fallback.
"""
import logging

from django.db import connections

logger = logging.getLogger(__name__)

SEARCH_INDEX_NAME = 'news_post_search_idx'
SEARCH_CONFIG = 'simple'
SEARCH_FIELDS = ('title', 'excerpt', 'body')


def search_vector():
    """The tsvector expression shared by the index and the ranked query."""
    from django.contrib.postgres.search import SearchVector

    return SearchVector(*SEARCH_FIELDS, config=SEARCH_CONFIG)


def search_index():
    from django.contrib.postgres.indexes import GinIndex

    return GinIndex(search_vector(), name=SEARCH_INDEX_NAME)


def supports_search_index(using='default'):
    return connections[using].vendor == 'postgresql'


def search_index_exists(using='default'):
    """True when the text index is present on the posts table."""
    if not supports_search_index(using):
        return False
    from .models import Post

    connection = connections[using]
    with connection.cursor() as cursor:
        constraints = connection.introspection.get_constraints(cursor, Post._meta.db_table)
    return SEARCH_INDEX_NAME in constraints


def create_search_index(schema_editor, model):
    """Add the text index to ``model``'s table when the backend supports it."""
    if schema_editor.connection.vendor != 'postgresql':
        logger.info(f"Skipping {SEARCH_INDEX_NAME}: backend {schema_editor.connection.vendor} has no text index")
        return False
    schema_editor.add_index(model, search_index())
    logger.info(f"Created text index {SEARCH_INDEX_NAME}")
    return True


def drop_search_index(schema_editor, model):
    if schema_editor.connection.vendor != 'postgresql':
        return False
    schema_editor.remove_index(model, search_index())
    logger.info(f"Dropped text index {SEARCH_INDEX_NAME}")
    return True
