# Generated migration for the global SiteSettings row

import sites.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SiteSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(default='global', max_length=32, unique=True)),
                ('logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('logo_public_id', models.CharField(blank=True, max_length=255, null=True)),
                ('icon_url', models.URLField(blank=True, max_length=500, null=True)),
                ('icon_public_id', models.CharField(blank=True, max_length=255, null=True)),
                ('favicon_url', models.URLField(blank=True, max_length=500, null=True)),
                ('favicon_public_id', models.CharField(blank=True, max_length=255, null=True)),
                ('contact_address', models.CharField(blank=True, max_length=255, null=True)),
                ('contact_phone', models.CharField(blank=True, max_length=50, null=True)),
                ('contact_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('ads_enabled', models.BooleanField(default=sites.models._default_ads_enabled)),
                ('facebook_app_id', models.CharField(blank=True, max_length=64, null=True)),
                ('facebook_app_secret', models.CharField(blank=True, max_length=255, null=True)),
                ('facebook_page_id', models.CharField(blank=True, max_length=64, null=True)),
                ('facebook_page_name', models.CharField(blank=True, max_length=255, null=True)),
                ('facebook_page_access_token', models.TextField(blank=True, null=True)),
                ('facebook_connected', models.BooleanField(default=False)),
                ('facebook_auto_post', models.BooleanField(default=False)),
                ('facebook_connected_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'site_settings',
                'verbose_name_plural': 'site settings',
            },
        ),
    ]
