"""
Serializers for core models.
"""

from rest_framework import serializers

from .models import Profile


class ProfileSerializer(serializers.ModelSerializer):
    """Serializer for the caller's shop profile."""

    class Meta:
        model = Profile
        fields = [
            "id",
            "full_name",
            "shop_name",
            "phone",
            "address",
            "avatar_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
