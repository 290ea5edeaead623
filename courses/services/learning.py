import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.exceptions import AccessDenied
from courses.models import CourseEnrollment, LessonProgress
from courses.services.certificates import issue_certificate_if_eligible
from courses.services.permissions import check_course
from courses.services.progress import get_course_progress
from organizations.permissions import Action

logger = logging.getLogger(__name__)

User = get_user_model()


def enroll(actor, user, course):
    if not course.published:
        raise ValidationError("Cannot enroll in an unpublished course")

    decision = check_course(actor, course, Action.VIEW)
    if not decision:
        raise AccessDenied(decision)

    enrollment, created = CourseEnrollment.objects.get_or_create(user=user, course=course)

    if created:
        logger.info("User %s enrolled in course %s", user.pk, course.pk)

    return enrollment


def set_lesson_completion(user, lesson, completed):
    """
    Toggles a lesson for an enrolled student and refreshes their course
    progress. XP is only awarded the first time a lesson is completed.
    """
    course = lesson.module.course

    with transaction.atomic():
        enrollment = (
            CourseEnrollment.objects
            .select_for_update()
            .filter(user=user, course=course)
            .first()
        )
        if enrollment is None:
            raise ValidationError("Enroll in the course before completing lessons.")

        record, _ = LessonProgress.objects.get_or_create(user=user, lesson=lesson)
        first_completion = completed and record.first_completed_at is None

        if completed:
            record.mark_completed()
        else:
            record.mark_incomplete()

        xp_gained = 0
        if first_completion:
            xp_gained = settings.LMS_LESSON_XP
            User.objects.filter(pk=user.pk).update(xp=F("xp") + xp_gained)

        _, _, percentage = get_course_progress(user, course)
        enrollment.progress = percentage

        certificate = None
        if percentage == 100:
            if not enrollment.completed_at:
                enrollment.completed_at = timezone.now()
            certificate = issue_certificate_if_eligible(user, course, percentage)
        else:
            # An issued certificate is kept; the enrollment follows progress
            enrollment.completed_at = None

        enrollment.save(update_fields=["progress", "completed_at"])

    return {
        "success": True,
        "xp_gained": xp_gained,
        "progress": percentage,
        "certificate": certificate,
    }
