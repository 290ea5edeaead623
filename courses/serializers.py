from rest_framework import serializers

from accounts.serializers import UserSerializer
from courses.models import (
    Assignment,
    Course,
    CourseCertificate,
    CourseEnrollment,
    CourseModule,
    Lesson,
    LessonComment,
    Submission,
)


# ============================
# CATALOG
# ============================

class CourseSerializer(serializers.ModelSerializer):
    instructor_name = serializers.CharField(source="instructor.get_full_name", read_only=True)

    class Meta:
        model = Course
        fields = (
            "id",
            "title",
            "slug",
            "description",
            "thumbnail_url",
            "organization",
            "instructor",
            "instructor_name",
            "published",
            "is_public",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class CourseWriteSerializer(serializers.Serializer):
    """
    Fields a client may set. Organization and instructor are never read
    from input; ``is_public`` may be downgraded by the marketplace gate.
    """

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    thumbnail_url = serializers.URLField(required=False, allow_blank=True)
    published = serializers.BooleanField(required=False)
    is_public = serializers.BooleanField(required=False)


class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = ("id", "title", "lesson_type", "order", "content_url", "text_content")


class ModuleSerializer(serializers.ModelSerializer):
    lessons = LessonSerializer(many=True, read_only=True)

    class Meta:
        model = CourseModule
        fields = ("id", "title", "order", "lessons")


class ModuleWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    order = serializers.IntegerField(required=False, min_value=1)


class LessonWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    lesson_type = serializers.ChoiceField(choices=Lesson.LESSON_TYPES)
    order = serializers.IntegerField(required=False, min_value=1)
    content_url = serializers.URLField(required=False, allow_blank=True)
    text_content = serializers.CharField(required=False, allow_blank=True)


# ============================
# TEAM
# ============================

class StaffMemberSerializer(serializers.Serializer):
    user = UserSerializer()
    role = serializers.CharField()
    is_owner = serializers.BooleanField()


class StaffAddSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    # Checked by the staff service so "instructor" gets a clear refusal
    role = serializers.CharField(max_length=20)


# ============================
# LEARNING
# ============================

class EnrollmentSerializer(serializers.ModelSerializer):
    course = CourseSerializer(read_only=True)

    class Meta:
        model = CourseEnrollment
        fields = ("id", "course", "enrolled_at", "completed_at", "progress")


class LessonCompletionSerializer(serializers.Serializer):
    completed = serializers.BooleanField(default=True)


class CertificateSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    course = CourseSerializer(read_only=True)

    class Meta:
        model = CourseCertificate
        fields = ("certificate_id", "user", "course", "issued_at")


# ============================
# ASSIGNMENTS
# ============================

class AssignmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Assignment
        fields = ("id", "course", "title", "description", "due_date", "max_score", "created_at")
        read_only_fields = ("id", "course", "created_at")


class SubmissionSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)

    class Meta:
        model = Submission
        fields = (
            "id",
            "assignment",
            "student",
            "content_url",
            "text_content",
            "grade",
            "feedback",
            "graded_by",
            "submitted_at",
            "graded_at",
        )
        read_only_fields = (
            "id",
            "assignment",
            "student",
            "grade",
            "feedback",
            "graded_by",
            "submitted_at",
            "graded_at",
        )


class GradeSerializer(serializers.Serializer):
    grade = serializers.IntegerField(min_value=0)
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


# ============================
# DISCUSSION
# ============================

class CommentReplySerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = LessonComment
        fields = ("id", "user", "parent", "content", "created_at")


class LessonCommentSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    replies = CommentReplySerializer(many=True, read_only=True)

    class Meta:
        model = LessonComment
        fields = ("id", "user", "parent", "content", "created_at", "replies")


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField()
    parent_id = serializers.IntegerField(required=False, allow_null=True)
