from django.conf import settings
from django.db import models

from .course import Course


class CourseRole(models.TextChoices):
    # Never stored: the owner holds it implicitly through course.instructor.
    INSTRUCTOR = "instructor", "Instructor"
    CO_INSTRUCTOR = "co-instructor", "Co-Instructor"
    TA = "ta", "Teaching Assistant"


ASSIGNABLE_STAFF_ROLES = (
    CourseRole.CO_INSTRUCTOR,
    CourseRole.TA,
)


# =====================================================
# COURSE STAFF
# =====================================================
class CourseStaff(models.Model):
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="staff"
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_staff_roles"
    )

    role = models.CharField(
        max_length=20,
        choices=[(role.value, role.label) for role in ASSIGNABLE_STAFF_ROLES],
    )

    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["course", "role", "user"]
        constraints = [
            models.UniqueConstraint(
                fields=["course", "user"],
                name="unique_course_staff_member"
            ),
            models.CheckConstraint(
                condition=models.Q(role__in=["co-instructor", "ta"]),
                name="course_staff_role_not_owner"
            ),
        ]

    def __str__(self):
        return f"{self.user} → {self.course} ({self.role})"
