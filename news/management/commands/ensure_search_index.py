"""
Management command to create (or drop) the post full-text index.
Usage: python manage.py ensure_search_index [--drop]
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import connections

from news.models import Post
from news.search_index import (
    SEARCH_INDEX_NAME,
    create_search_index,
    drop_search_index,
    search_index_exists,
    supports_search_index,
)


class Command(BaseCommand):
    help = 'Create the full-text index used by ranked post search'

    def add_arguments(self, parser):
        parser.add_argument('--drop', action='store_true', help='Drop the index instead of creating it')
        parser.add_argument('--database', default='default')

    def handle(self, *args, **options):
        using = options['database']
        if not supports_search_index(using):
            raise CommandError(
                f"Database '{using}' is not PostgreSQL; search will keep using the substring fallback."
            )

        exists = search_index_exists(using)
        with connections[using].schema_editor() as schema_editor:
            if options['drop']:
                if not exists:
                    self.stdout.write(f'{SEARCH_INDEX_NAME} does not exist.')
                    return
                drop_search_index(schema_editor, Post)
                self.stdout.write(self.style.SUCCESS(f'Dropped {SEARCH_INDEX_NAME}.'))
                return

            if exists:
                self.stdout.write(f'{SEARCH_INDEX_NAME} already exists.')
                return
            create_search_index(schema_editor, Post)
        self.stdout.write(self.style.SUCCESS(f'Created {SEARCH_INDEX_NAME}.'))
