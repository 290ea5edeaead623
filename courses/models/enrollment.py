from django.db import models
from django.conf import settings

from .course import Course


# =====================================================
# COURSE ENROLLMENT
# =====================================================
class CourseEnrollment(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_enrollments"
    )

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="enrollments"
    )

    enrolled_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    # Percentage of lessons completed
    progress = models.PositiveSmallIntegerField(default=0)

    class Meta:
        unique_together = ("user", "course")
        ordering = ["-enrolled_at"]

    @property
    def is_completed(self):
        return self.completed_at is not None

    def __str__(self):
        return f"{self.user} → {self.course}"
