from django.contrib import admin
from news.slugs import save_with_unique_slug
from .models import Category, Division, District, Upazila


class TaxonomyAdmin(admin.ModelAdmin):
    search_fields = ('name',)
    readonly_fields = ('slug', 'created_at', 'updated_at')

    def save_model(self, request, obj, form, change):
        if not obj.slug or 'name' in form.changed_data:
            save_with_unique_slug(obj, obj.name)
        else:
            super().save_model(request, obj, form, change)


@admin.register(Category)
class CategoryAdmin(TaxonomyAdmin):
    list_display = ('name', 'slug', 'created_at')


@admin.register(Division)
class DivisionAdmin(TaxonomyAdmin):
    list_display = ('name', 'slug')


@admin.register(District)
class DistrictAdmin(TaxonomyAdmin):
    list_display = ('name', 'slug', 'division')
    list_filter = ('division',)


@admin.register(Upazila)
class UpazilaAdmin(TaxonomyAdmin):
    list_display = ('name', 'slug', 'district')
    list_filter = ('district__division',)
    search_fields = ('name', 'district__name')
