"""
Serializers for posts.
"""
from rest_framework import serializers

from taxonomy.models import Category, District, Upazila
from .models import Post
from .paths import post_path
from .services import derive_excerpt, normalize_tags

MAX_TAGS = 10
MAX_TAG_LENGTH = 30


class TaxonomyBriefSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    slug = serializers.CharField()


class PostListSerializer(serializers.ModelSerializer):
    """Card-sized post representation used by listings and search."""
    path = serializers.SerializerMethodField()
    category = TaxonomyBriefSerializer(read_only=True)
    district = TaxonomyBriefSerializer(read_only=True)
    upazila = TaxonomyBriefSerializer(read_only=True, allow_null=True)
    tags = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = (
            'id', 'title', 'slug', 'path', 'excerpt', 'image_url',
            'category', 'district', 'upazila', 'tags',
            'author', 'featured', 'status', 'published_at',
        )

    def get_path(self, obj):
        return post_path(obj)

    def get_tags(self, obj):
        return obj.tag_names()


class PostDetailSerializer(PostListSerializer):
    class Meta(PostListSerializer.Meta):
        fields = PostListSerializer.Meta.fields + (
            'body', 'image_public_id', 'meta_title', 'meta_description',
            'created_at', 'updated_at',
        )


class TagListField(serializers.Field):
    """Accepts a list of names or a comma-separated string."""

    def to_internal_value(self, data):
        if not isinstance(data, (str, list, tuple)):
            raise serializers.ValidationError('Tags must be a list or a comma-separated string.')
        return normalize_tags(data)

    def to_representation(self, value):
        return value


def _length_validator(label, minimum, maximum=None):
    def validate(value):
        value = value.strip()
        if len(value) < minimum or (maximum is not None and len(value) > maximum):
            if maximum is None:
                raise serializers.ValidationError(f"{label} must be at least {minimum} characters.")
            raise serializers.ValidationError(f"{label} must be between {minimum} and {maximum} characters.")
        return value
    return validate


class PostWriteSerializer(serializers.ModelSerializer):
    """
    Validates admin post input. The slug is never accepted from the client;
    it is resolved from the title by news.services.
    """
    excerpt = serializers.CharField(required=False, allow_blank=True)
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    district = serializers.PrimaryKeyRelatedField(queryset=District.objects.all())
    upazila = serializers.PrimaryKeyRelatedField(
        queryset=Upazila.objects.all(), required=False, allow_null=True
    )
    tags = TagListField(required=False)
    status = serializers.ChoiceField(choices=Post.STATUS_CHOICES, required=False)

    class Meta:
        model = Post
        fields = (
            'title', 'excerpt', 'body', 'image_url', 'image_public_id',
            'category', 'district', 'upazila', 'tags',
            'author', 'meta_title', 'meta_description', 'featured', 'status',
        )

    def validate_title(self, value):
        return _length_validator('Title', 5, 180)(value)

    def validate_body(self, value):
        return _length_validator('Body', 50)(value)

    def validate_author(self, value):
        return _length_validator('Author', 2, 80)(value)

    def validate_meta_title(self, value):
        return _length_validator('Meta title', 10, 160)(value)

    def validate_meta_description(self, value):
        return _length_validator('Meta description', 20, 200)(value)

    def validate_excerpt(self, value):
        value = value.strip()
        if value:
            return _length_validator('Excerpt', 20, 500)(value)
        return value

    def validate_tags(self, value):
        if len(value) > MAX_TAGS:
            raise serializers.ValidationError(f"At most {MAX_TAGS} tags are allowed.")
        for name in value:
            if len(name) > MAX_TAG_LENGTH:
                raise serializers.ValidationError(f"Tag '{name}' is longer than {MAX_TAG_LENGTH} characters.")
        return value

    def validate(self, attrs):
        # Omitted on create, or cleared on update: derive from the body
        if not attrs.get('excerpt') and (self.instance is None or 'excerpt' in attrs):
            body = attrs.get('body', getattr(self.instance, 'body', ''))
            attrs['excerpt'] = derive_excerpt(body)

        district = attrs.get('district', getattr(self.instance, 'district', None))
        upazila = attrs.get('upazila', getattr(self.instance, 'upazila', None))
        if upazila is not None and district is not None and upazila.district_id != district.pk:
            raise serializers.ValidationError({'upazila': 'Upazila does not belong to the selected district.'})
        return attrs
