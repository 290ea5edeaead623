from django.db import models

from .course import Course


# =====================================================
# COURSE MODULE
# =====================================================
class CourseModule(models.Model):

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="modules"
    )

    title = models.CharField(max_length=255)

    order = models.PositiveIntegerField()

    class Meta:
        ordering = ["order"]
        constraints = [
            models.UniqueConstraint(
                fields=["course", "order"],
                name="unique_course_module_order"
            )
        ]

    # -------------------------
    # Save override (safe)
    # -------------------------
    def save(self, *args, **kwargs):

        # Auto-assign order if not provided
        if not self.order:
            max_order = CourseModule.objects.filter(
                course=self.course
            ).aggregate(models.Max("order"))["order__max"] or 0

            self.order = max_order + 1

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.course.title} → {self.title}"
