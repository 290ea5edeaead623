from django.conf import settings
from rest_framework import serializers

from organizations.models import Organization


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Organization
        fields = ("id", "name", "slug", "logo_url")


class OrganizationAdminSerializer(serializers.ModelSerializer):
    """Includes the join code; only for admins of the organization."""

    class Meta:
        model = Organization
        fields = ("id", "name", "slug", "logo_url", "access_code", "is_active", "created_at")
        read_only_fields = ("created_at",)
        extra_kwargs = {"access_code": {"required": False}}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        # The marketplace is found by its slug and must stay reachable
        instance = self.instance
        if isinstance(instance, Organization) and instance.is_public_marketplace:
            self.fields["slug"].read_only = True
            self.fields["is_active"].read_only = True

    def validate_slug(self, value):
        if value == settings.LMS_MARKETPLACE_SLUG:
            raise serializers.ValidationError("This slug is reserved for the public marketplace.")
        return value


class JoinOrganizationSerializer(serializers.Serializer):
    access_code = serializers.CharField(max_length=32)
