"""
Serializers for member accounts.
"""

from rest_framework import serializers

from .models import Member


class MemberSerializer(serializers.ModelSerializer):
    """Member as seen by the member themselves."""

    display_name = serializers.CharField(read_only=True)
    codes_remaining = serializers.IntegerField(read_only=True)

    class Meta:
        model = Member
        fields = [
            'id',
            'email',
            'username',
            'display_name',
            'avatar_url',
            'codes_remaining',
            'next_refresh_allowed',
            'date_joined',
            'last_login',
        ]
        read_only_fields = fields


class MemberUpdateSerializer(serializers.ModelSerializer):
    """Serializer for updating profile fields."""

    class Meta:
        model = Member
        fields = ['username', 'avatar_url']


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)
    security_code = serializers.CharField(max_length=32, trim_whitespace=True)


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)
