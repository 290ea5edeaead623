from django.db import models
from django.conf import settings

from .course import Course


# =====================================================
# COURSE CERTIFICATE
# =====================================================

class CourseCertificate(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_certificates"
    )

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="certificates"
    )

    issued_at = models.DateTimeField(auto_now_add=True)
    certificate_id = models.CharField(max_length=50, unique=True)

    class Meta:
        unique_together = ("user", "course")

    def __str__(self):
        return f"Certificate → {self.user} | {self.course}"
