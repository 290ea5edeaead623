from django.contrib.auth.models import AbstractUser
from django.db import models


class GlobalRole(models.TextChoices):
    STUDENT = "student", "Student"
    INSTRUCTOR = "instructor", "Instructor"
    TA = "ta", "Teaching Assistant"
    CO_INSTRUCTOR = "co-instructor", "Co-Instructor"
    ORG_ADMIN = "org_admin", "Organization Admin"
    SUPER_ADMIN = "super_admin", "Super Admin"


# Global roles that list courses through the staff-scoped visibility branch.
COURSE_STAFF_ROLES = (
    GlobalRole.INSTRUCTOR,
    GlobalRole.TA,
    GlobalRole.CO_INSTRUCTOR,
)

# Global roles allowed to author a brand-new course.
COURSE_CREATOR_ROLES = (
    GlobalRole.INSTRUCTOR,
    GlobalRole.ORG_ADMIN,
    GlobalRole.SUPER_ADMIN,
)

ADMIN_ROLES = (
    GlobalRole.ORG_ADMIN,
    GlobalRole.SUPER_ADMIN,
)


class User(AbstractUser):
    role = models.CharField(
        max_length=20,
        choices=GlobalRole.choices,
        default=GlobalRole.STUDENT,
    )

    # Null means independent (B2C). The marketplace organization means the same.
    organization = models.ForeignKey(
        "organizations.Organization",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="users",
    )

    xp = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["username"]

    @property
    def is_super_admin(self):
        return self.role == GlobalRole.SUPER_ADMIN

    @property
    def is_org_admin(self):
        return self.role == GlobalRole.ORG_ADMIN

    def __str__(self):
        return self.username
