"""
News content models: Post and its free-text Tag set.
"""
from django.db import models
from django.utils import timezone

from taxonomy.models import Category, District, Upazila


class Tag(models.Model):
    name = models.CharField(max_length=30, unique=True)

    class Meta:
        db_table = 'tags'
        ordering = ['name']

    def __str__(self):
        return self.name


class PostQuerySet(models.QuerySet):
    def published(self):
        return self.filter(status=Post.STATUS_PUBLISHED)

    def with_relations(self):
        return self.select_related('category', 'district', 'upazila').prefetch_related('tags')


class Post(models.Model):
    STATUS_DRAFT = 'draft'
    STATUS_PUBLISHED = 'published'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PUBLISHED, 'Published'),
    ]

    title = models.CharField(max_length=180)
    slug = models.SlugField(max_length=220, unique=True)
    excerpt = models.TextField(max_length=500)
    body = models.TextField(help_text="Markdown-formatted article body")
    image_url = models.URLField(max_length=500)
    image_public_id = models.CharField(max_length=255, help_text="Image CDN public id")

    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='posts')
    district = models.ForeignKey(District, on_delete=models.PROTECT, related_name='posts')
    upazila = models.ForeignKey(
        Upazila,
        on_delete=models.PROTECT,
        related_name='posts',
        null=True,
        blank=True,
    )
    tags = models.ManyToManyField(Tag, related_name='posts', blank=True)

    author = models.CharField(max_length=80)
    meta_title = models.CharField(max_length=160)
    meta_description = models.CharField(max_length=200)
    featured = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    published_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        db_table = 'posts'
        ordering = ['-published_at', '-created_at']
        indexes = [
            models.Index(fields=['status', 'published_at'], name='posts_status_published_idx'),
            models.Index(fields=['status', 'featured'], name='posts_status_featured_idx'),
            models.Index(fields=['category', 'status'], name='posts_category_status_idx'),
            models.Index(fields=['district', 'status'], name='posts_district_status_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_published(self):
        return self.status == self.STATUS_PUBLISHED

    def apply_status(self, status):
        """
        Set the lifecycle status. ``published_at`` is stamped only on the
        transition into published and cleared when the post goes back to draft.
        """
        if status == self.STATUS_PUBLISHED and not self.is_published:
            self.published_at = timezone.now()
        elif status == self.STATUS_DRAFT:
            self.published_at = None
        self.status = status

    def tag_names(self):
        return [tag.name for tag in self.tags.all()]
