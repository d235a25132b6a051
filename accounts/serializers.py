"""
Serializers for admin authentication and profile updates.
"""
from rest_framework import serializers
from django.contrib.auth import authenticate
from .models import User

MIN_PASSWORD_LENGTH = 8


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model."""

    class Meta:
        model = User
        fields = ('id', 'email', 'name', 'phone', 'is_staff', 'created_at')
        read_only_fields = ('id', 'is_staff', 'created_at')


class LoginSerializer(serializers.Serializer):
    """Serializer for login requests."""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        email = attrs['email'].strip().lower()
        user = authenticate(username=email, password=attrs['password'])
        if not user:
            raise serializers.ValidationError('Invalid email or password.')
        if not user.is_active:
            raise serializers.ValidationError('User account is disabled.')
        if not user.is_staff:
            raise serializers.ValidationError('Admin access required.')
        attrs['user'] = user
        return attrs


class ProfileSerializer(serializers.Serializer):
    """
    Profile update for the signed-in admin. Changing the password requires
    the current password and a matching confirmation.
    """
    name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    current_password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    new_password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    confirm_password = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError('A user with this email already exists.')
        return value

    def validate(self, attrs):
        current = attrs.pop('current_password', '')
        new = attrs.pop('new_password', '')
        confirm = attrs.pop('confirm_password', '')
        if current or new or confirm:
            if len(new) < MIN_PASSWORD_LENGTH:
                raise serializers.ValidationError(
                    {'new_password': f'New password must be at least {MIN_PASSWORD_LENGTH} characters.'}
                )
            if new != confirm:
                raise serializers.ValidationError(
                    {'confirm_password': 'New password and confirm password do not match.'}
                )
            if not self.instance.check_password(current):
                raise serializers.ValidationError({'current_password': 'Current password is incorrect.'})
            attrs['password'] = new
        return attrs

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for key, value in validated_data.items():
            setattr(instance, key, value.strip() if isinstance(value, str) else value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
