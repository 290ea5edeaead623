from django.db import models
from django.conf import settings
from django.utils import timezone

from .lesson import Lesson


# =====================================================
# LESSON PROGRESS
# =====================================================
class LessonProgress(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_lesson_progress"
    )

    lesson = models.ForeignKey(
        Lesson,
        on_delete=models.CASCADE,
        related_name="progress_records"
    )

    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)

    # Set once, the first time the lesson is completed. Guards XP farming.
    first_completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("user", "lesson")

    def mark_completed(self):
        if not self.completed:
            self.completed = True
            self.completed_at = timezone.now()
            if not self.first_completed_at:
                self.first_completed_at = self.completed_at
            self.save()

    def mark_incomplete(self):
        if self.completed:
            self.completed = False
            self.completed_at = None
            self.save()

    def __str__(self):
        return f"{self.user} → {self.lesson}"
