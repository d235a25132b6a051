"""
Taxonomy models: categories and the division > district > upazila hierarchy.

Slugs are unique within each model only; a district and a category may share
a slug. Foreign keys use PROTECT so the store refuses deletes the application
layer failed to block (see taxonomy.services.delete_taxonomy).
"""
from django.db import models


class TaxonomyBase(models.Model):
    name = models.CharField(max_length=80)
    slug = models.SlugField(max_length=120, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # (label, related accessor) pairs counted before a delete is allowed
    dependent_relations = ()

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self):
        return self.name

    def dependent_counts(self):
        """Return ``{label: count}`` for every relation that blocks deletion."""
        return {
            label: getattr(self, accessor).count()
            for label, accessor in self.dependent_relations
        }


class Category(TaxonomyBase):
    dependent_relations = (('posts', 'posts'),)

    class Meta(TaxonomyBase.Meta):
        db_table = 'categories'
        verbose_name_plural = 'categories'


class Division(TaxonomyBase):
    dependent_relations = (('districts', 'districts'),)

    class Meta(TaxonomyBase.Meta):
        db_table = 'divisions'


class District(TaxonomyBase):
    division = models.ForeignKey(
        Division,
        on_delete=models.PROTECT,
        related_name='districts',
        null=True,
        blank=True,
    )

    dependent_relations = (('posts', 'posts'), ('upazilas', 'upazilas'))

    class Meta(TaxonomyBase.Meta):
        db_table = 'districts'


class Upazila(TaxonomyBase):
    district = models.ForeignKey(District, on_delete=models.PROTECT, related_name='upazilas')

    dependent_relations = (('posts', 'posts'),)

    class Meta(TaxonomyBase.Meta):
        db_table = 'upazilas'
        indexes = [
            models.Index(fields=['district', 'slug'], name='upazilas_district_slug_idx'),
        ]
