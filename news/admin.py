from django.contrib import admin
from .models import Post, Tag
from .slugs import save_with_unique_slug


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'status', 'category', 'district', 'featured', 'published_at')
    list_filter = ('status', 'featured', 'category', 'district__division')
    search_fields = ('title', 'slug', 'author')
    readonly_fields = ('slug', 'published_at', 'created_at', 'updated_at')
    filter_horizontal = ('tags',)

    def save_model(self, request, obj, form, change):
        if 'status' in form.changed_data:
            status = obj.status
            obj.status = form.initial.get('status', Post.STATUS_DRAFT)
            obj.apply_status(status)
        if not obj.slug or 'title' in form.changed_data:
            save_with_unique_slug(obj, obj.title)
        else:
            super().save_model(request, obj, form, change)


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    search_fields = ('name',)
