"""User DRF serializers for API output.

Input validation lives in the Pydantic DTOs (``dtos.py``); these
serializers only render ``User`` rows.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.users.models import User


class UserSerializer(serializers.ModelSerializer):
    """Read serializer for the User resource."""

    class Meta:
        model = User
        fields = [
            "id",
            "first_name",
            "last_name",
            "phone",
            "email",
            "address",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Denormalised user fields embedded in order responses."""

    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "phone", "email"]
        read_only_fields = fields
