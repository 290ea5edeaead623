from django.db import models
from django.core.exceptions import ValidationError

from ckeditor.fields import RichTextField

from .module import CourseModule


# =====================================================
# LESSON
# =====================================================

class Lesson(models.Model):

    TYPE_VIDEO = "video"
    TYPE_PDF = "pdf"
    TYPE_TEXT = "text"

    LESSON_TYPES = [
        (TYPE_VIDEO, "Video"),
        (TYPE_PDF, "PDF"),
        (TYPE_TEXT, "Text"),
    ]

    module = models.ForeignKey(
        CourseModule,
        on_delete=models.CASCADE,
        related_name="lessons"
    )

    title = models.CharField(max_length=255)
    lesson_type = models.CharField(max_length=20, choices=LESSON_TYPES)
    order = models.PositiveIntegerField()

    # ================= CONTENT =================
    # Opaque blob-store reference for video / pdf lessons.
    content_url = models.URLField(blank=True)

    text_content = RichTextField(blank=True)

    class Meta:
        ordering = ["order"]
        unique_together = ("module", "order")

    # ================= VALIDATION =================
    def clean(self):

        if self.lesson_type in (self.TYPE_VIDEO, self.TYPE_PDF) and not self.content_url:
            raise ValidationError("Video and PDF lessons need a content URL.")

        if self.lesson_type == self.TYPE_TEXT and not self.text_content:
            raise ValidationError("Text lessons need content.")

    def save(self, *args, **kwargs):
        if not self.order:
            max_order = Lesson.objects.filter(
                module=self.module
            ).aggregate(models.Max("order"))["order__max"] or 0

            self.order = max_order + 1

        super().save(*args, **kwargs)

    @property
    def course(self):
        return self.module.course

    def __str__(self):
        return f"{self.module.course.title} → {self.title}"
