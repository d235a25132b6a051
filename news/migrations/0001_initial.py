# Generated migration for posts and tags

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('taxonomy', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Tag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=30, unique=True)),
            ],
            options={
                'db_table': 'tags',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Post',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=180)),
                ('slug', models.SlugField(max_length=220, unique=True)),
                ('excerpt', models.TextField(max_length=500)),
                ('body', models.TextField(help_text='Markdown-formatted article body')),
                ('image_url', models.URLField(max_length=500)),
                ('image_public_id', models.CharField(help_text='Image CDN public id', max_length=255)),
                ('author', models.CharField(max_length=80)),
                ('meta_title', models.CharField(max_length=160)),
                ('meta_description', models.CharField(max_length=200)),
                ('featured', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('published', 'Published')], default='draft', max_length=20)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='posts', to='taxonomy.category')),
                ('district', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='posts', to='taxonomy.district')),
                ('upazila', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='posts', to='taxonomy.upazila')),
                ('tags', models.ManyToManyField(blank=True, related_name='posts', to='news.tag')),
            ],
            options={
                'db_table': 'posts',
                'ordering': ['-published_at', '-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'published_at'], name='posts_status_published_idx'),
                    models.Index(fields=['status', 'featured'], name='posts_status_featured_idx'),
                    models.Index(fields=['category', 'status'], name='posts_category_status_idx'),
                    models.Index(fields=['district', 'status'], name='posts_district_status_idx'),
                ],
            },
        ),
    ]
