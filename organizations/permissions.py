# organizations/permissions.py
"""
Permission evaluator.

``can(actor, action, resource_kind, context)`` decides a single request and
returns a ``Decision``. It performs no lookups and never raises for a denial:
callers fetch the context (owner, tenant, the actor's staff role, enrollment)
and translate a deny into a 403 at the HTTP boundary.

Evaluation order, first match wins:

1. super_admin is allowed everything. Anyone else whose organization is
   missing or deactivated is denied (OrganizationNotFound).
2. org_admin with a real tenant is allowed anything inside that tenant and
   denied (CrossTenant) anything outside it.
3. Course actions use the actor's effective course role (owner, otherwise
   the CourseStaff role, otherwise none) against ``COURSE_RULES``.
4. Everything else is InsufficientRole.
"""
from dataclasses import dataclass
from typing import Optional

from django.db import models

from accounts.models.user import GlobalRole, COURSE_CREATOR_ROLES
from accounts.services.identity import INDEPENDENT, TenantRef
from courses.models.staff import CourseRole


class Action(models.TextChoices):
    VIEW = "view", "View"
    EDIT = "edit", "Edit"
    DELETE = "delete", "Delete"
    MANAGE_TEAM = "manage_team", "Manage team"
    GRADE = "grade", "Grade"


class ResourceKind(models.TextChoices):
    COURSE = "course", "Course"
    USER = "user", "User"
    ORGANIZATION = "organization", "Organization"


class DenyReason(models.TextChoices):
    INSUFFICIENT_ROLE = "InsufficientRole", "You do not have permission to perform this action."
    CROSS_TENANT = "CrossTenant", "This resource belongs to another organization."
    ORGANIZATION_NOT_FOUND = "OrganizationNotFound", "Your organization could not be found."
    UNAUTHENTICATED = "Unauthenticated", "Authentication required."


# Which effective course roles may perform each action.
COURSE_RULES = {
    Action.DELETE: frozenset({CourseRole.INSTRUCTOR}),
    Action.MANAGE_TEAM: frozenset({CourseRole.INSTRUCTOR}),
    Action.EDIT: frozenset({CourseRole.INSTRUCTOR, CourseRole.CO_INSTRUCTOR}),
    Action.GRADE: frozenset({CourseRole.INSTRUCTOR, CourseRole.CO_INSTRUCTOR, CourseRole.TA}),
    Action.VIEW: frozenset({CourseRole.INSTRUCTOR, CourseRole.CO_INSTRUCTOR, CourseRole.TA}),
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def __bool__(self):
        return self.allowed

    @property
    def message(self):
        if self.allowed:
            return ""
        return DenyReason(self.reason).label

    def as_dict(self):
        if self.allowed:
            return {"decision": "allow"}
        return {"decision": "deny", "reason": str(self.reason)}


ALLOW = Decision(True)


def deny(reason) -> Decision:
    return Decision(False, DenyReason(reason))


@dataclass(frozen=True)
class ResourceContext:
    """
    Pre-fetched facts about the target resource.

    For courses ``owner_id`` is the instructor of record and ``staff_role``
    the actor's CourseStaff role on that course. For users ``owner_id`` is
    the target user and ``target_role`` their global role. For
    organizations only ``tenant`` matters.
    """

    tenant: TenantRef = INDEPENDENT
    owner_id: Optional[int] = None
    staff_role: Optional[str] = None
    published: bool = False
    is_public: bool = False
    is_enrolled: bool = False
    target_role: Optional[str] = None


def effective_course_role(actor, context: ResourceContext):
    if context.owner_id is not None and actor.id == context.owner_id:
        return CourseRole.INSTRUCTOR
    if context.staff_role:
        return CourseRole(context.staff_role)
    return None


def _outside_tenant(actor, context):
    return not context.tenant.is_independent and not actor.tenant.matches(context.tenant)


def _course_decision(actor, action, context):
    role = effective_course_role(actor, context)
    if role in COURSE_RULES[action]:
        return ALLOW

    if action == Action.VIEW:
        if context.is_enrolled:
            return ALLOW
        if context.published and (context.is_public or actor.tenant.matches(context.tenant)):
            return ALLOW

    if _outside_tenant(actor, context):
        return deny(DenyReason.CROSS_TENANT)
    return deny(DenyReason.INSUFFICIENT_ROLE)


def _user_decision(actor, action, context):
    if context.owner_id == actor.id and action in (Action.VIEW, Action.EDIT):
        return ALLOW

    # Instructors look up colleagues when building a course team.
    if (
        action == Action.VIEW
        and actor.role == GlobalRole.INSTRUCTOR
        and actor.tenant.matches(context.tenant)
    ):
        return ALLOW

    if _outside_tenant(actor, context):
        return deny(DenyReason.CROSS_TENANT)
    return deny(DenyReason.INSUFFICIENT_ROLE)


def _organization_decision(actor, action, context):
    if action == Action.VIEW and actor.tenant.matches(context.tenant):
        return ALLOW

    if _outside_tenant(actor, context):
        return deny(DenyReason.CROSS_TENANT)
    return deny(DenyReason.INSUFFICIENT_ROLE)


_RESOURCE_HANDLERS = {
    ResourceKind.COURSE: _course_decision,
    ResourceKind.USER: _user_decision,
    ResourceKind.ORGANIZATION: _organization_decision,
}


def can(actor, action, resource_kind, context: ResourceContext) -> Decision:
    if actor is None:
        return deny(DenyReason.UNAUTHENTICATED)

    action = Action(action)
    resource_kind = ResourceKind(resource_kind)

    # 1. God mode
    if actor.role == GlobalRole.SUPER_ADMIN:
        return ALLOW

    # Members of a missing or deactivated organization fail closed
    if not actor.tenant.resolved:
        return deny(DenyReason.ORGANIZATION_NOT_FOUND)

    # 2. Tenant administrator (an independent org_admin has no tenant to run)
    if actor.role == GlobalRole.ORG_ADMIN and not actor.tenant.is_independent:
        if not actor.tenant.matches(context.tenant):
            return deny(DenyReason.CROSS_TENANT)
        if resource_kind == ResourceKind.USER and context.target_role == GlobalRole.SUPER_ADMIN:
            return deny(DenyReason.INSUFFICIENT_ROLE)
        return ALLOW

    # 3-5. Resource specific rules
    return _RESOURCE_HANDLERS[resource_kind](actor, action, context)


def can_create_course(actor) -> Decision:
    """
    Creating a course is the only decision driven by global role alone.
    """
    if actor is None:
        return deny(DenyReason.UNAUTHENTICATED)

    if actor.role not in COURSE_CREATOR_ROLES:
        return deny(DenyReason.INSUFFICIENT_ROLE)

    if actor.role != GlobalRole.SUPER_ADMIN and not actor.tenant.resolved:
        return deny(DenyReason.ORGANIZATION_NOT_FOUND)

    return ALLOW


def marketplace_publish_allowed(*tenants) -> bool:
    """
    A course may be listed on the public marketplace only when every party
    writing it (owner, editing actor) is independent.
    """
    return all(tenant.is_independent for tenant in tenants)
