from django.contrib import admin
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from courses.models import (
    Assignment,
    Course,
    CourseCertificate,
    CourseEnrollment,
    CourseModule,
    CourseStaff,
    Lesson,
    LessonComment,
    LessonProgress,
    Submission,
)


# =========================
# INLINE CONFIGS
# =========================

class LessonInline(admin.TabularInline):
    model = Lesson
    extra = 1
    fields = (
        "title",
        "lesson_type",
        "order",
        "content_url",
    )
    ordering = ("order",)


class CourseModuleInline(admin.StackedInline):
    model = CourseModule
    extra = 1
    show_change_link = True
    fields = ("title", "order")
    ordering = ("order",)


class CourseStaffInline(admin.TabularInline):
    model = CourseStaff
    extra = 0
    autocomplete_fields = ("user",)


# =========================
# MAIN ADMINS
# =========================
@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "organization",
        "instructor",
        "published",
        "is_public",
        "created_at",
    )

    list_filter = (
        "organization",
        "published",
        "is_public",
    )

    search_fields = (
        "title",
        "description",
        "organization__name",
    )

    prepopulated_fields = {"slug": ("title",)}

    inlines = (CourseStaffInline, CourseModuleInline)

    fieldsets = (
        ("Basic Info", {
            "fields": (
                "title",
                "slug",
                "description",
                "thumbnail_url",
            )
        }),

        ("Ownership", {
            "fields": (
                "organization",
                "instructor",
            ),
            "description": (
                "Independent instructors' courses belong to the public "
                "marketplace organization."
            )
        }),

        ("Publishing", {
            "fields": (
                "published",
                "is_public",
            ),
            "description": "Only independent courses can be listed on the marketplace.",
        }),

        ("Meta", {
            "fields": ("created_at", "updated_at"),
        }),
    )

    readonly_fields = ("created_at", "updated_at")
    autocomplete_fields = ("organization", "instructor")


@admin.register(CourseModule)
class CourseModuleAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "course",
        "order",
    )
    list_filter = ("course",)
    search_fields = ("title",)
    ordering = ("course", "order")
    inlines = (LessonInline,)


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "module",
        "lesson_type",
        "order",
    )

    list_filter = (
        "lesson_type",
        "module__course",
    )

    search_fields = ("title",)
    ordering = ("module", "order")

    fieldsets = (
        ("Lesson Info", {
            "fields": (
                "module",
                "title",
                "lesson_type",
                "order",
            )
        }),

        ("Video / PDF", {
            "fields": ("content_url",),
            "classes": ("collapse",),
        }),

        ("Text Content", {
            "fields": ("text_content", "text_preview"),
        }),
    )

    readonly_fields = ("text_preview",)

    def text_preview(self, obj):
        if not obj.text_content:
            return "- No content yet -"

        return format_html(
            '<div class="lesson-content" '
            'style="max-height:400px; overflow:auto; '
            'border:1px solid #e5e7eb; padding:16px; '
            'background:#f9fafb;">{}</div>',
            mark_safe(obj.text_content),
        )

    text_preview.short_description = "Preview"


# =========================
# READ-ONLY / SUPPORT ADMINS
# =========================

@admin.register(CourseEnrollment)
class CourseEnrollmentAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "course",
        "progress",
        "enrolled_at",
        "completed_at",
    )
    list_filter = ("course",)
    search_fields = ("user__username", "course__title")
    readonly_fields = ("enrolled_at",)


@admin.register(LessonProgress)
class LessonProgressAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "lesson",
        "completed",
        "completed_at",
    )
    list_filter = ("completed", "lesson__module__course")
    search_fields = ("user__username", "lesson__title")
    readonly_fields = ("completed_at", "first_completed_at")


@admin.register(CourseCertificate)
class CourseCertificateAdmin(admin.ModelAdmin):
    list_display = ("certificate_id", "user", "course", "issued_at")
    search_fields = ("certificate_id", "user__username", "course__title")
    readonly_fields = ("certificate_id", "issued_at")


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "due_date", "max_score")
    list_filter = ("course",)
    search_fields = ("title",)


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("assignment", "student", "grade", "submitted_at", "graded_at")
    list_filter = ("assignment__course",)
    search_fields = ("student__username", "assignment__title")
    readonly_fields = ("submitted_at", "graded_at")


@admin.register(LessonComment)
class LessonCommentAdmin(admin.ModelAdmin):
    list_display = ("lesson", "user", "parent", "created_at")
    list_filter = ("lesson__module__course",)
    search_fields = ("content", "user__username", "lesson__title")
    readonly_fields = ("created_at",)
