"""
Authentication Serializers
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT pair carrying the role claim used by the frontend."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['email'] = user.email
        return token


class UserSerializer(serializers.ModelSerializer):
    """User serializer for profile"""

    full_name = serializers.ReadOnlyField()
    identifier = serializers.ReadOnlyField()
    is_hr_or_admin = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'identifier', 'role', 'is_hr_or_admin', 'is_active', 'date_joined',
        ]
        read_only_fields = ['id', 'email', 'role', 'is_active', 'date_joined']
