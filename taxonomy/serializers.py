"""
Serializers for categories and the location hierarchy.
"""
from rest_framework import serializers
from .models import Category, Division, District, Upazila

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 80


class TaxonomySerializer(serializers.ModelSerializer):
    """
    Shared name/slug handling. ``slug`` is optional on write; when given it is
    used as the slug source instead of the name, and is still de-duplicated.
    """
    slug = serializers.CharField(max_length=120, required=False, allow_blank=True)

    def validate_name(self, value):
        value = value.strip()
        if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
            raise serializers.ValidationError(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
            )
        return value

    def validate_slug(self, value):
        return value.strip()


class CategorySerializer(TaxonomySerializer):
    post_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ('id', 'name', 'slug', 'post_count', 'created_at', 'updated_at')
        read_only_fields = ('id', 'created_at', 'updated_at')

    def get_post_count(self, obj):
        return obj.posts.count()


class DivisionSerializer(TaxonomySerializer):
    class Meta:
        model = Division
        fields = ('id', 'name', 'slug', 'created_at', 'updated_at')
        read_only_fields = ('id', 'created_at', 'updated_at')


class DistrictSerializer(TaxonomySerializer):
    division_name = serializers.CharField(source='division.name', read_only=True, default=None)

    class Meta:
        model = District
        fields = ('id', 'name', 'slug', 'division', 'division_name', 'created_at', 'updated_at')
        read_only_fields = ('id', 'created_at', 'updated_at')
        extra_kwargs = {'division': {'required': False, 'allow_null': True}}


class UpazilaSerializer(TaxonomySerializer):
    district_name = serializers.CharField(source='district.name', read_only=True)

    class Meta:
        model = Upazila
        fields = ('id', 'name', 'slug', 'district', 'district_name', 'created_at', 'updated_at')
        read_only_fields = ('id', 'created_at', 'updated_at')


class UpazilaTreeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Upazila
        fields = ('id', 'name', 'slug')


class DistrictTreeSerializer(serializers.ModelSerializer):
    upazilas = UpazilaTreeSerializer(many=True, read_only=True)

    class Meta:
        model = District
        fields = ('id', 'name', 'slug', 'upazilas')


class DivisionTreeSerializer(serializers.ModelSerializer):
    """Division with nested districts and upazilas for location menus."""
    districts = DistrictTreeSerializer(many=True, read_only=True)

    class Meta:
        model = Division
        fields = ('id', 'name', 'slug', 'districts')


class CategoryBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ('id', 'name', 'slug')
