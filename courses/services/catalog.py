import logging

from django.db import transaction

from accounts.services.identity import current_marketplace_id, tenant_for_user
from core.exceptions import AccessDenied, OrganizationNotFound
from courses.models import Course
from courses.services.permissions import check_course
from organizations.models import Organization
from organizations.permissions import Action, can_create_course, marketplace_publish_allowed

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "thumbnail_url", "published", "is_public")


def gate_public_flag(requested, *tenants, course_id=None):
    """
    Returns the is_public value that may actually be stored. B2B tenants
    never list on the marketplace; a request for it is quietly downgraded.
    """
    if not requested:
        return False

    if marketplace_publish_allowed(*tenants):
        return True

    logger.info("Marketplace listing refused for course %s; forcing is_public=False", course_id)
    return False


def create_course(actor, owner, data):
    """
    ``owner`` is the stored user behind ``actor``. Organization and
    instructor always come from the actor, never from input.
    """
    decision = can_create_course(actor)
    if not decision:
        raise AccessDenied(decision)

    if actor.tenant.is_independent:
        organization = Organization.objects.marketplace()
    else:
        organization = (
            Organization.objects.active()
            .filter(pk=actor.tenant.organization_id)
            .first()
        )
        if organization is None:
            raise OrganizationNotFound(actor.tenant.organization_id)

    course = Course(
        organization=organization,
        instructor=owner,
        title=data["title"],
        description=data.get("description", ""),
        thumbnail_url=data.get("thumbnail_url", ""),
        published=data.get("published", False),
        is_public=gate_public_flag(data.get("is_public", False), actor.tenant),
    )
    course.full_clean(exclude=["slug"])
    course.save()

    logger.info(
        "Course %s created by user %s in %s (public=%s)",
        course.pk,
        actor.id,
        actor.tenant,
        course.is_public,
    )
    return course


def update_course(actor, course_id, data):
    with transaction.atomic():
        course = Course.objects.select_for_update().select_related("instructor").get(pk=course_id)

        decision = check_course(actor, course, Action.EDIT)
        if not decision:
            raise AccessDenied(decision)

        for field in EDITABLE_FIELDS:
            if field in data:
                setattr(course, field, data[field])

        if "is_public" in data:
            marketplace_id = current_marketplace_id()
            course.is_public = gate_public_flag(
                data["is_public"],
                actor.tenant,
                tenant_for_user(course.instructor, marketplace_id),
                course_id=course.pk,
            )

        course.full_clean()
        course.save()

    return course


def delete_course(actor, course_id):
    with transaction.atomic():
        course = Course.objects.select_for_update().get(pk=course_id)

        decision = check_course(actor, course, Action.DELETE)
        if not decision:
            raise AccessDenied(decision)

        logger.info("Course %s deleted by user %s", course.pk, actor.id)
        course.delete()


def regate_owned_courses(owner):
    """
    Called after an owner changes organization: anything they listed on the
    marketplace while independent comes off it once they join a tenant.
    """
    tenant = tenant_for_user(owner)
    if marketplace_publish_allowed(tenant):
        return 0

    updated = Course.objects.filter(instructor=owner, is_public=True).update(is_public=False)
    if updated:
        logger.info("Unlisted %s marketplace course(s) of user %s after tenant change", updated, owner.pk)
    return updated
