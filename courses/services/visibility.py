"""
Visibility resolver: which courses an actor sees in a listing.

This shapes the listing query. It is separate from the per-course checks in
``organizations.permissions`` and has its own branch order:

1. independent actors see the marketplace catalog (public and published,
   whatever tenant holds the course). This runs first because an
   independent actor may still carry the marketplace organization id.
2. an unresolved tenant fails closed with OrganizationNotFound.
3. org_admin sees every course of the tenant, drafts included.
4. instructor / ta / co-instructor see tenant courses they own or staff.
5. everyone else sees the published courses of their tenant.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.db.models import Q

from accounts.models.user import GlobalRole, COURSE_STAFF_ROLES
from organizations.permissions import DenyReason

logger = logging.getLogger(__name__)


class VisibilityScope:
    MARKETPLACE = "marketplace"
    TENANT_ALL = "tenant_all"
    TENANT_STAFFED = "tenant_staffed"
    TENANT_PUBLISHED = "tenant_published"
    NONE = "none"


@dataclass(frozen=True)
class Visibility:
    scope: str
    actor_id: Optional[int] = None
    organization_id: Optional[int] = None
    error: Optional[DenyReason] = None

    @property
    def ok(self):
        return self.error is None

    def matches(self, course, staffed_course_ids=()):
        """
        In-memory form of the predicate, for callers that already hold the
        course rows. ``staffed_course_ids`` are the ids the actor has a
        CourseStaff row for.
        """
        if self.scope == VisibilityScope.MARKETPLACE:
            return bool(course.is_public and course.published)

        if self.scope == VisibilityScope.NONE:
            return False

        if course.organization_id != self.organization_id:
            return False

        if self.scope == VisibilityScope.TENANT_ALL:
            return True

        if self.scope == VisibilityScope.TENANT_STAFFED:
            return course.instructor_id == self.actor_id or course.pk in set(staffed_course_ids)

        return bool(course.published)

    def as_q(self):
        if self.scope == VisibilityScope.MARKETPLACE:
            return Q(is_public=True, published=True)

        if self.scope == VisibilityScope.NONE:
            return Q(pk__in=[])

        tenant_q = Q(organization_id=self.organization_id)

        if self.scope == VisibilityScope.TENANT_ALL:
            return tenant_q

        if self.scope == VisibilityScope.TENANT_STAFFED:
            from courses.models import CourseStaff

            staffed = CourseStaff.objects.filter(user_id=self.actor_id).values("course_id")
            return tenant_q & (Q(instructor_id=self.actor_id) | Q(pk__in=staffed))

        return tenant_q & Q(published=True)


def resolve_visibility(actor) -> Visibility:
    tenant = actor.tenant

    if tenant.is_independent:
        return Visibility(VisibilityScope.MARKETPLACE, actor_id=actor.id)

    if not tenant.resolved:
        return Visibility(
            VisibilityScope.NONE,
            actor_id=actor.id,
            organization_id=tenant.organization_id,
            error=DenyReason.ORGANIZATION_NOT_FOUND,
        )

    if actor.role == GlobalRole.ORG_ADMIN:
        scope = VisibilityScope.TENANT_ALL
    elif actor.role in COURSE_STAFF_ROLES:
        scope = VisibilityScope.TENANT_STAFFED
    else:
        scope = VisibilityScope.TENANT_PUBLISHED

    return Visibility(scope, actor_id=actor.id, organization_id=tenant.organization_id)


def filter_courses(visibility, courses, staffed_course_ids=()):
    staffed = set(staffed_course_ids)
    return [course for course in courses if visibility.matches(course, staffed)]


def visible_courses(actor, queryset=None):
    """
    Returns (queryset, visibility). On OrganizationNotFound the queryset is
    empty; never a wider catalog.
    """
    from courses.models import Course

    if queryset is None:
        queryset = Course.objects.all()

    visibility = resolve_visibility(actor)

    if not visibility.ok:
        logger.warning(
            "Course listing failed closed for user %s: %s",
            actor.id,
            visibility.error,
        )
        return queryset.none(), visibility

    return queryset.filter(visibility.as_q()), visibility
