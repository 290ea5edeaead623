import secrets

from django.conf import settings
from django.db import models


def generate_access_code():
    return secrets.token_hex(4).upper()


class OrganizationQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def by_access_code(self, code):
        """
        Returns the active organization a self-service join code points at,
        or None. The marketplace code never matches: joining the marketplace
        is the same as having no organization.
        """
        if not code:
            return None

        return (
            self.active()
            .exclude(slug=settings.LMS_MARKETPLACE_SLUG)
            .filter(access_code=code.strip())
            .first()
        )

    def marketplace(self):
        """
        The reserved tenant that owns every independent course.
        Created on first use so a fresh database is always consistent.
        """
        org, _ = self.get_or_create(
            slug=settings.LMS_MARKETPLACE_SLUG,
            defaults={
                "name": settings.LMS_MARKETPLACE_NAME,
                "access_code": settings.LMS_MARKETPLACE_ACCESS_CODE,
            },
        )
        return org

    def marketplace_id(self):
        return (
            self.filter(slug=settings.LMS_MARKETPLACE_SLUG)
            .values_list("id", flat=True)
            .first()
        )


class Organization(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(unique=True)

    access_code = models.CharField(
        max_length=32,
        unique=True,
        default=generate_access_code,
        help_text="Code students enter at registration to join this organization",
    )

    logo_url = models.URLField(blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = OrganizationQuerySet.as_manager()

    class Meta:
        ordering = ["name"]

    @property
    def is_public_marketplace(self):
        return self.slug == settings.LMS_MARKETPLACE_SLUG

    def __str__(self):
        return self.name
