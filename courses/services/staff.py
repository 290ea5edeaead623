import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from accounts.services.identity import current_marketplace_id, tenant_for_user, tenant_from_id
from core.exceptions import AccessDenied
from courses.models import Course, CourseStaff
from courses.models.staff import ASSIGNABLE_STAFF_ROLES, CourseRole
from courses.services.permissions import check_course
from organizations.permissions import Action

logger = logging.getLogger(__name__)


def list_staff(actor, course):
    """
    The owner first (implicit instructor), then stored staff rows.
    Anyone who may view the course may see its team.
    """
    decision = check_course(actor, course, Action.VIEW)
    if not decision:
        raise AccessDenied(decision)

    team = [{"user": course.instructor, "role": CourseRole.INSTRUCTOR.value, "is_owner": True}]
    for member in course.staff.select_related("user"):
        team.append({"user": member.user, "role": member.role, "is_owner": False})
    return team


def _validate_new_member(course, user, role):
    if role not in ASSIGNABLE_STAFF_ROLES:
        if role == CourseRole.INSTRUCTOR:
            raise ValidationError("A course has a single instructor; it cannot be assigned as a staff role.")
        raise ValidationError(f"Unknown course role: {role}")

    if user.pk == course.instructor_id:
        raise ValidationError("The course owner is already its instructor.")

    marketplace_id = current_marketplace_id()
    course_tenant = tenant_from_id(course.organization_id, marketplace_id)
    member_tenant = tenant_for_user(user, marketplace_id)

    same_tenant = course_tenant.matches(member_tenant) or (
        course_tenant.is_independent and member_tenant.is_independent
    )
    if not same_tenant:
        raise ValidationError("Staff must belong to the course's organization.")


def add_staff(actor, course_id, user, role):
    with transaction.atomic():
        course = Course.objects.select_for_update().get(pk=course_id)

        decision = check_course(actor, course, Action.MANAGE_TEAM)
        if not decision:
            raise AccessDenied(decision)

        _validate_new_member(course, user, role)

        member, created = CourseStaff.objects.update_or_create(
            course=course,
            user=user,
            defaults={"role": role},
        )

    logger.info(
        "User %s %s as %s on course %s by user %s",
        user.pk,
        "added" if created else "changed",
        role,
        course.pk,
        actor.id,
    )
    return member


def remove_staff(actor, course_id, user_id):
    with transaction.atomic():
        course = Course.objects.select_for_update().get(pk=course_id)

        decision = check_course(actor, course, Action.MANAGE_TEAM)
        if not decision:
            raise AccessDenied(decision)

        deleted, _ = CourseStaff.objects.filter(course=course, user_id=user_id).delete()

    if deleted:
        logger.info("User %s removed from course %s by user %s", user_id, course.pk, actor.id)
    return bool(deleted)
