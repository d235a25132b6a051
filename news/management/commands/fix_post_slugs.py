"""
Management command to assign slugs to posts stored without one.
Usage: python manage.py fix_post_slugs
"""
from django.core.management.base import BaseCommand

from news.models import Post
from news.slugs import make_slug, resolve_unique_slug


def fallback_base(post):
    """Slug base for a post whose title has no usable characters."""
    return make_slug(post.title) or f"post-{str(post.pk)[-6:]}"


class Command(BaseCommand):
    help = 'Assign unique slugs to posts with a blank slug (existing slugs are left alone)'

    def handle(self, *args, **options):
        missing = Post.objects.filter(slug='').order_by('created_at', 'id')
        fixed = 0
        for post in missing:
            post.slug = resolve_unique_slug(fallback_base(post), post.pk)
            post.save(update_fields=['slug'])
            fixed += 1
            self.stdout.write(f'{post.pk}: {post.slug}')

        self.stdout.write(self.style.SUCCESS(f'Fixed {fixed} post slugs.'))
