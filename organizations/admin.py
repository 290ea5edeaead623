from django.contrib import admin

from organizations.models import Organization


# =========================
# ORGANIZATION
# =========================
@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "access_code", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "slug", "access_code")
    prepopulated_fields = {"slug": ("name",)}
