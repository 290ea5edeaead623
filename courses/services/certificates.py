import logging
import uuid

from django.conf import settings

from core.exceptions import AccessDenied
from courses.models import CourseCertificate
from courses.services.permissions import check_course
from organizations.permissions import Action

logger = logging.getLogger(__name__)


def new_certificate_id():
    return f"{settings.LMS_CERTIFICATE_PREFIX}-{uuid.uuid4().hex[:12].upper()}"


def issue_certificate_if_eligible(user, course, progress):
    """
    Issues certificate if:
    - progress == 100
    - certificate does not already exist
    """

    if progress < 100:
        return None

    certificate, created = CourseCertificate.objects.get_or_create(
        user=user,
        course=course,
        defaults={
            "certificate_id": new_certificate_id()
        }
    )

    if created:
        logger.info("Certificate %s issued to user %s for course %s", certificate.certificate_id, user.pk, course.pk)

    return certificate


def get_certificate_for(actor, certificate):
    """
    The holder may always see their certificate; otherwise it takes the
    grade permission on the course (its staff, or admins by precedence).
    """
    if certificate.user_id == actor.id:
        return certificate

    decision = check_course(actor, certificate.course, Action.GRADE)
    if not decision:
        raise AccessDenied(decision)

    return certificate
