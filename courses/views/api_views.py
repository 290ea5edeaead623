from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import AccessDenied, OrganizationNotFound
from core.http import request_actor
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
from courses.serializers import (
    AssignmentSerializer,
    CertificateSerializer,
    CommentCreateSerializer,
    CourseSerializer,
    CourseWriteSerializer,
    EnrollmentSerializer,
    GradeSerializer,
    LessonCommentSerializer,
    LessonCompletionSerializer,
    LessonSerializer,
    LessonWriteSerializer,
    ModuleSerializer,
    ModuleWriteSerializer,
    StaffAddSerializer,
    StaffMemberSerializer,
    SubmissionSerializer,
)
from courses.services import catalog, content, discussion, grading, learning, staff
from courses.services.certificates import get_certificate_for
from courses.services.permissions import check_course, course_permissions
from courses.services.progress import completed_lesson_ids, get_course_progress, get_resume_lesson
from courses.services.visibility import visible_courses
from organizations.permissions import Action

User = get_user_model()


def _require(actor, course, action):
    decision = check_course(actor, course, action)
    if not decision:
        raise AccessDenied(decision)


# -------------------------
# Catalog
# -------------------------
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def course_list(request):
    actor = request_actor(request)

    if request.method == "POST":
        serializer = CourseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = catalog.create_course(actor, request.user, serializer.validated_data)
        return Response(CourseSerializer(course).data, status=status.HTTP_201_CREATED)

    courses, visibility = visible_courses(
        actor,
        Course.objects.select_related("instructor"),
    )
    if not visibility.ok:
        raise OrganizationNotFound(visibility.organization_id)

    return Response(CourseSerializer(courses, many=True).data)


@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def course_detail(request, pk):
    actor = request_actor(request)
    course = get_object_or_404(Course.objects.select_related("instructor"), pk=pk)

    if request.method == "PATCH":
        serializer = CourseWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        course = catalog.update_course(actor, course.pk, serializer.validated_data)
        return Response(CourseSerializer(course).data)

    if request.method == "DELETE":
        catalog.delete_course(actor, course.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    _require(actor, course, Action.VIEW)

    completed, total, percentage = get_course_progress(request.user, course)
    resume = get_resume_lesson(request.user, course)

    data = CourseSerializer(course).data
    data.update({
        "modules": ModuleSerializer(content.course_outline(course), many=True).data,
        "permissions": course_permissions(actor, course),
        "enrolled": CourseEnrollment.objects.filter(user=request.user, course=course).exists(),
        "completed_lesson_ids": completed_lesson_ids(request.user, course),
        "progress": {"completed": completed, "total": total, "percentage": percentage},
        "resume_lesson_id": resume.pk if resume else None,
    })
    return Response(data)


# -------------------------
# Team
# -------------------------
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def course_staff(request, pk):
    actor = request_actor(request)
    course = get_object_or_404(Course.objects.select_related("instructor"), pk=pk)

    if request.method == "POST":
        serializer = StaffAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = get_object_or_404(User, pk=serializer.validated_data["user_id"])
        staff.add_staff(actor, course.pk, user, serializer.validated_data["role"])
        return Response(
            StaffMemberSerializer(staff.list_staff(actor, course), many=True).data,
            status=status.HTTP_201_CREATED,
        )

    return Response(StaffMemberSerializer(staff.list_staff(actor, course), many=True).data)


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
def course_staff_member(request, pk, user_id):
    course = get_object_or_404(Course, pk=pk)

    if not staff.remove_staff(request_actor(request), course.pk, user_id):
        return Response({"message": "Not a member of this course team"}, status=status.HTTP_404_NOT_FOUND)

    return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------------
# Content
# -------------------------
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def module_create(request, pk):
    course = get_object_or_404(Course, pk=pk)

    serializer = ModuleWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    module = content.create_module(
        request_actor(request),
        course,
        serializer.validated_data["title"],
        serializer.validated_data.get("order"),
    )
    return Response(ModuleSerializer(module).data, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def module_detail(request, module_id):
    actor = request_actor(request)
    module = get_object_or_404(CourseModule.objects.select_related("course"), pk=module_id)

    if request.method == "DELETE":
        content.delete_module(actor, module)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ModuleWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    module = content.update_module(actor, module, serializer.validated_data)
    return Response(ModuleSerializer(module).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def lesson_create(request, module_id):
    module = get_object_or_404(CourseModule.objects.select_related("course"), pk=module_id)

    serializer = LessonWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    lesson = content.create_lesson(request_actor(request), module, serializer.validated_data)
    return Response(LessonSerializer(lesson).data, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def lesson_detail(request, lesson_id):
    actor = request_actor(request)
    lesson = get_object_or_404(Lesson.objects.select_related("module__course"), pk=lesson_id)

    if request.method == "DELETE":
        content.delete_lesson(actor, lesson)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = LessonWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    lesson = content.update_lesson(actor, lesson, serializer.validated_data)
    return Response(LessonSerializer(lesson).data)


# -------------------------
# Learning
# -------------------------
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def course_enroll(request, pk):
    course = get_object_or_404(Course, pk=pk)
    enrollment = learning.enroll(request_actor(request), request.user, course)
    return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_enrollments(request):
    enrollments = (
        CourseEnrollment.objects
        .filter(user=request.user)
        .select_related("course__instructor")
        .order_by("-enrolled_at")
    )
    return Response(EnrollmentSerializer(enrollments, many=True).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def lesson_complete(request, lesson_id):
    lesson = get_object_or_404(Lesson.objects.select_related("module__course"), pk=lesson_id)

    serializer = LessonCompletionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = learning.set_lesson_completion(
        request.user,
        lesson,
        serializer.validated_data["completed"],
    )
    certificate = result["certificate"]

    return Response({
        "success": result["success"],
        "xp_gained": result["xp_gained"],
        "progress": result["progress"],
        "certificate_id": certificate.certificate_id if certificate else None,
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def certificate_detail(request, certificate_id):
    certificate = get_object_or_404(
        CourseCertificate.objects.select_related("user", "course__instructor"),
        certificate_id=certificate_id,
    )
    certificate = get_certificate_for(request_actor(request), certificate)
    return Response(CertificateSerializer(certificate).data)


# -------------------------
# Assignments
# -------------------------
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def assignment_list(request, pk):
    actor = request_actor(request)
    course = get_object_or_404(Course, pk=pk)

    if request.method == "POST":
        serializer = AssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = grading.create_assignment(actor, course, serializer.validated_data)
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    _require(actor, course, Action.VIEW)
    return Response(AssignmentSerializer(course.assignments.all(), many=True).data)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def assignment_submissions(request, assignment_id):
    assignment = get_object_or_404(Assignment.objects.select_related("course"), pk=assignment_id)

    if request.method == "POST":
        serializer = SubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = grading.submit(request.user, assignment, serializer.validated_data)
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)

    submissions = grading.list_submissions(request_actor(request), assignment)
    return Response(SubmissionSerializer(submissions, many=True).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def submission_grade(request, submission_id):
    submission = get_object_or_404(
        Submission.objects.select_related("assignment__course"),
        pk=submission_id,
    )

    serializer = GradeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    submission = grading.grade_submission(
        request_actor(request),
        submission,
        serializer.validated_data["grade"],
        serializer.validated_data["feedback"],
    )
    return Response(SubmissionSerializer(submission).data)


# -------------------------
# Discussion
# -------------------------
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def lesson_comments(request, lesson_id):
    actor = request_actor(request)
    lesson = get_object_or_404(Lesson.objects.select_related("module__course"), pk=lesson_id)

    if request.method == "POST":
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = discussion.post_comment(
            actor,
            request.user,
            lesson,
            serializer.validated_data["content"],
            serializer.validated_data.get("parent_id"),
        )
        return Response(LessonCommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    comments = discussion.list_comments(actor, lesson)
    return Response(LessonCommentSerializer(comments, many=True).data)


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
def comment_detail(request, comment_id):
    comment = get_object_or_404(
        LessonComment.objects.select_related("lesson__module__course"),
        pk=comment_id,
    )
    discussion.delete_comment(request_actor(request), comment)
    return Response(status=status.HTTP_204_NO_CONTENT)
