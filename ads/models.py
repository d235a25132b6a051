"""
Ad placements served alongside public pages.
"""
from django.db import models


class Ad(models.Model):
    SIDEBAR_PRIMARY = 'sidebar_primary'
    HOMEPAGE_BANNER = 'homepage_banner'
    ARTICLE_INLINE = 'article_inline'
    FOOTER_STRIP = 'footer_strip'
    PLACEMENT_CHOICES = [
        (SIDEBAR_PRIMARY, 'Sidebar (300x250)'),
        (HOMEPAGE_BANNER, 'Homepage Banner'),
        (ARTICLE_INLINE, 'Article Inline'),
        (FOOTER_STRIP, 'Footer Strip'),
    ]

    title = models.CharField(max_length=120)
    placement = models.CharField(max_length=32, choices=PLACEMENT_CHOICES)
    image_url = models.URLField(max_length=500)
    image_public_id = models.CharField(max_length=255)
    target_url = models.URLField(max_length=500, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ads'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['placement', 'is_active'], name='ads_placement_active_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_placement_display()})"

    @classmethod
    def placement_values(cls):
        return [value for value, _ in cls.PLACEMENT_CHOICES]


def get_active_ad(placement):
    """Newest active ad for a placement, or None."""
    return Ad.objects.filter(placement=placement, is_active=True).order_by('-created_at', '-id').first()

