# Full-text index for ranked post search (PostgreSQL only)

from django.db import migrations

from news.search_index import create_search_index, drop_search_index


def forwards(apps, schema_editor):
    create_search_index(schema_editor, apps.get_model('news', 'Post'))


def backwards(apps, schema_editor):
    drop_search_index(schema_editor, apps.get_model('news', 'Post'))


class Migration(migrations.Migration):

    dependencies = [
        ('news', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(forwards, backwards),
    ]
