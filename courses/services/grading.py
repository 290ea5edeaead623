import logging

from django.core.exceptions import ValidationError
from django.utils import timezone

from core.exceptions import AccessDenied
from courses.models import Assignment, CourseEnrollment, Submission
from courses.services.permissions import check_course
from organizations.permissions import Action

logger = logging.getLogger(__name__)


def _require(actor, course, action):
    decision = check_course(actor, course, action)
    if not decision:
        raise AccessDenied(decision)


def create_assignment(actor, course, data):
    _require(actor, course, Action.EDIT)

    assignment = Assignment(course=course, **data)
    assignment.full_clean()
    assignment.save()
    return assignment


def submit(user, assignment, data):
    if not CourseEnrollment.objects.filter(user=user, course=assignment.course).exists():
        raise ValidationError("Only enrolled students can submit.")

    if not data.get("content_url") and not data.get("text_content"):
        raise ValidationError("A submission needs a file link or text.")

    return Submission.objects.create(
        assignment=assignment,
        student=user,
        content_url=data.get("content_url", ""),
        text_content=data.get("text_content", ""),
    )


def list_submissions(actor, assignment):
    _require(actor, assignment.course, Action.GRADE)
    return assignment.submissions.select_related("student")


def grade_submission(actor, submission, grade, feedback=""):
    assignment = submission.assignment
    _require(actor, assignment.course, Action.GRADE)

    if grade is None or grade < 0 or grade > assignment.max_score:
        raise ValidationError(f"Grade must be between 0 and {assignment.max_score}.")

    submission.grade = grade
    submission.feedback = feedback
    submission.graded_by_id = actor.id
    submission.graded_at = timezone.now()
    submission.save(update_fields=["grade", "feedback", "graded_by", "graded_at"])

    logger.info("Submission %s graded %s by user %s", submission.pk, grade, actor.id)
    return submission
