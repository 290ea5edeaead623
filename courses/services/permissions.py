import logging

from accounts.services.identity import current_marketplace_id, tenant_from_id
from courses.models import CourseEnrollment, CourseStaff
from organizations.permissions import (
    Action,
    ResourceContext,
    ResourceKind,
    can,
)

logger = logging.getLogger(__name__)


def staff_role_for(user_id, course):
    return (
        CourseStaff.objects
        .filter(course=course, user_id=user_id)
        .values_list("role", flat=True)
        .first()
    )


def course_context(actor, course, marketplace_id=None):
    """
    Loads everything the evaluator needs to decide on ``course`` for ``actor``.
    """
    if marketplace_id is None:
        marketplace_id = current_marketplace_id()

    return ResourceContext(
        tenant=tenant_from_id(course.organization_id, marketplace_id),
        owner_id=course.instructor_id,
        staff_role=staff_role_for(actor.id, course),
        published=course.published,
        is_public=course.is_public,
        is_enrolled=CourseEnrollment.objects.filter(
            user_id=actor.id,
            course=course
        ).exists(),
    )


def check_course(actor, course, action):
    decision = can(actor, action, ResourceKind.COURSE, course_context(actor, course))

    if not decision:
        logger.info(
            "Denied %s on course %s for user %s: %s",
            Action(action).value,
            course.pk,
            actor.id,
            decision.reason,
        )

    return decision


def course_permissions(actor, course):
    """
    Every course action for one actor, from a single context fetch.
    Used by clients to decide which controls to offer.
    """
    context = course_context(actor, course)
    return {
        action.value: bool(can(actor, action, ResourceKind.COURSE, context))
        for action in Action
    }
