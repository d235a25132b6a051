# Generated migration for ads

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Ad',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=120)),
                ('placement', models.CharField(choices=[('sidebar_primary', 'Sidebar (300x250)'), ('homepage_banner', 'Homepage Banner'), ('article_inline', 'Article Inline'), ('footer_strip', 'Footer Strip')], max_length=32)),
                ('image_url', models.URLField(max_length=500)),
                ('image_public_id', models.CharField(max_length=255)),
                ('target_url', models.URLField(blank=True, max_length=500, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'ads',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['placement', 'is_active'], name='ads_placement_active_idx')],
            },
        ),
    ]
