"""
Serializers for ads.
"""
from rest_framework import serializers
from .models import Ad


class AdSerializer(serializers.ModelSerializer):
    placement_label = serializers.CharField(source='get_placement_display', read_only=True)

    class Meta:
        model = Ad
        fields = (
            'id', 'title', 'placement', 'placement_label', 'image_url', 'image_public_id',
            'target_url', 'is_active', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'created_at', 'updated_at')

    def validate_title(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Ad title is required.')
        return value

    def validate_target_url(self, value):
        if not value:
            return None
        if not value.lower().startswith(('http://', 'https://')):
            raise serializers.ValidationError('Target URL must start with http:// or https://')
        return value


class PublicAdSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ad
        fields = ('id', 'title', 'placement', 'image_url', 'target_url')
