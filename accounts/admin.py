from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import InstructorRequest, User


# ============================================================
# USERS
# ============================================================

@admin.register(User)
class LmsUserAdmin(UserAdmin):
    list_display = (
        "username",
        "email",
        "role",
        "organization",
        "xp",
        "is_active",
    )

    list_filter = (
        "role",
        "organization",
        "is_active",
    )

    fieldsets = UserAdmin.fieldsets + (
        ("Campus", {"fields": ("role", "organization", "xp")}),
    )

    autocomplete_fields = (
        "organization",
    )


# ============================================================
# INSTRUCTOR REQUESTS
# ============================================================

@admin.register(InstructorRequest)
class InstructorRequestAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "status",
        "created_at",
        "reviewed_by",
        "reviewed_at",
    )

    list_filter = (
        "status",
    )

    search_fields = (
        "user__username",
        "user__email",
    )

    readonly_fields = (
        "created_at",
        "reviewed_at",
    )
