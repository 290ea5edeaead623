from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.models import GlobalRole, InstructorRequest
from accounts.services.identity import current_marketplace_id, is_independent

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    independent = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "role",
            "organization",
            "independent",
            "xp",
        )
        read_only_fields = fields

    def get_independent(self, obj):
        if "marketplace_id" not in self.context:
            self.context["marketplace_id"] = current_marketplace_id()
        return is_independent(obj, self.context["marketplace_id"])


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """What a user may change about themselves. Never role or organization."""

    class Meta:
        model = User
        fields = ("first_name", "last_name", "email")


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    access_code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


# ============================
# ADMINISTRATION
# ============================

class AdminUserCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    role = serializers.ChoiceField(choices=GlobalRole.choices, default=GlobalRole.STUDENT)
    organization_id = serializers.IntegerField(required=False, allow_null=True)


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=GlobalRole.choices)


class OrganizationAssignSerializer(serializers.Serializer):
    organization_id = serializers.IntegerField(allow_null=True)


class BulkImportSerializer(serializers.Serializer):
    # Rows are validated one by one by the import so bad rows are skipped
    users = serializers.ListField(child=serializers.DictField(), allow_empty=False)


# ============================
# INSTRUCTOR REQUESTS
# ============================

class InstructorRequestSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = InstructorRequest
        fields = ("id", "user", "bio", "linkedin_url", "status", "created_at", "reviewed_at")
        read_only_fields = ("id", "user", "status", "created_at", "reviewed_at")


class InstructorRequestReviewSerializer(serializers.Serializer):
    approve = serializers.BooleanField()
