"""
User administration for org_admins and super_admins: provisioning, role
and organization changes, bulk import, scoped listings and reports.

Every check on a target user goes through the permission evaluator with
resource kind ``user``, so an org_admin stays inside its tenant and can
never touch a super_admin.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Avg, Count, Q
from django.utils import timezone

from accounts.models import GlobalRole, InstructorRequest
from accounts.models.user import ADMIN_ROLES
from accounts.services.identity import tenant_for_user
from core.exceptions import AccessDenied, OrganizationNotFound
from organizations.models import Organization
from organizations.permissions import (
    Action,
    DenyReason,
    ResourceContext,
    ResourceKind,
    can,
    deny,
)

logger = logging.getLogger(__name__)

User = get_user_model()


# ============================
# CHECKS
# ============================

def user_context(target, marketplace_id=None):
    return ResourceContext(
        tenant=tenant_for_user(target, marketplace_id),
        owner_id=target.pk,
        target_role=target.role,
    )


def _require_admin(actor):
    if actor is None:
        raise AccessDenied(deny(DenyReason.UNAUTHENTICATED))

    if actor.role not in ADMIN_ROLES:
        raise AccessDenied(deny(DenyReason.INSUFFICIENT_ROLE))

    if actor.role == GlobalRole.ORG_ADMIN:
        # An org_admin without a tenant has nothing to administer
        if actor.tenant.is_independent:
            raise AccessDenied(deny(DenyReason.INSUFFICIENT_ROLE))
        if not actor.tenant.resolved:
            raise OrganizationNotFound(actor.tenant.organization_id)


def _require_on_user(actor, target, action=Action.EDIT):
    _require_admin(actor)

    decision = can(actor, action, ResourceKind.USER, user_context(target))
    if not decision:
        logger.info("Denied %s on user %s for user %s: %s", action, target.pk, actor.id, decision.reason)
        raise AccessDenied(decision)


def _grantable_roles(actor):
    if actor.role == GlobalRole.SUPER_ADMIN:
        return set(GlobalRole.values)
    return set(GlobalRole.values) - set(ADMIN_ROLES)


def _scoped_users(actor):
    users = User.objects.select_related("organization")

    if actor.role == GlobalRole.SUPER_ADMIN:
        return users

    return users.filter(organization_id=actor.tenant.organization_id).exclude(
        role=GlobalRole.SUPER_ADMIN
    )


# ============================
# LISTING
# ============================

def list_users(actor, search=None):
    """
    Admins see their tenant (super_admin sees everyone). Instructors may
    search colleagues in their own tenant to build a course team.
    """
    if actor is not None and actor.role == GlobalRole.INSTRUCTOR:
        if actor.tenant.is_independent:
            users = User.objects.none()
        else:
            users = User.objects.filter(
                organization_id=actor.tenant.organization_id
            ).exclude(role=GlobalRole.SUPER_ADMIN)
    else:
        _require_admin(actor)
        users = _scoped_users(actor)

    if search:
        users = users.filter(
            Q(username__icontains=search)
            | Q(email__icontains=search)
            | Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
        )

    return users.order_by("username")


# ============================
# PROVISIONING
# ============================

def _target_organization(actor, organization_id):
    if actor.role == GlobalRole.ORG_ADMIN:
        # org_admins always provision into their own tenant
        return Organization.objects.get(pk=actor.tenant.organization_id)

    if organization_id:
        try:
            return Organization.objects.active().get(pk=organization_id)
        except Organization.DoesNotExist:
            raise ValidationError("Organization not found")

    if actor.tenant.is_independent:
        return None

    return Organization.objects.filter(pk=actor.tenant.organization_id).first()


def create_user_by_admin(actor, data):
    _require_admin(actor)

    role = data.get("role") or GlobalRole.STUDENT
    if role not in GlobalRole.values:
        raise ValidationError(f"Unknown role: {role}")

    if role not in _grantable_roles(actor):
        raise AccessDenied(deny(DenyReason.INSUFFICIENT_ROLE))

    username = (data.get("username") or "").strip()
    if not username:
        raise ValidationError("Username is required")

    if User.objects.filter(username=username).exists():
        raise ValidationError("User already exists")

    organization = _target_organization(actor, data.get("organization_id"))

    user = User(
        username=username,
        email=data.get("email", ""),
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        role=role,
        organization=organization,
    )

    if data.get("password"):
        user.set_password(data["password"])
    else:
        user.set_unusable_password()

    user.full_clean(exclude=["password"])
    user.save()

    logger.info(
        "User %s (%s) created by user %s in %s",
        user.pk,
        role,
        actor.id,
        organization.slug if organization else "independent",
    )
    return user


def update_user_role(actor, target, role):
    if role not in GlobalRole.values:
        raise ValidationError(f"Unknown role: {role}")

    _require_on_user(actor, target)

    if role not in _grantable_roles(actor):
        raise AccessDenied(deny(DenyReason.INSUFFICIENT_ROLE))

    previous = target.role
    target.role = role
    target.save(update_fields=["role"])

    logger.info("User %s role changed %s -> %s by user %s", target.pk, previous, role, actor.id)
    return target


def reassign_organization(actor, target, organization_id):
    """
    Moves a user between tenants (or out to independent with None).
    Only a super_admin may do this; courses the user lists on the
    marketplace are unlisted if they land in a tenant.
    """
    if actor is None or actor.role != GlobalRole.SUPER_ADMIN:
        raise AccessDenied(deny(DenyReason.INSUFFICIENT_ROLE))

    organization = None
    if organization_id:
        try:
            organization = Organization.objects.active().get(pk=organization_id)
        except Organization.DoesNotExist:
            raise ValidationError("Organization not found")

    from courses.services.catalog import regate_owned_courses

    with transaction.atomic():
        target.organization = organization
        target.save(update_fields=["organization"])
        regate_owned_courses(target)

    logger.info(
        "User %s moved to %s by user %s",
        target.pk,
        organization.slug if organization else "independent",
        actor.id,
    )
    return target


def bulk_import_users(actor, rows):
    """
    Creates each row that is valid; duplicates and bad rows are skipped
    and reported instead of failing the batch.
    """
    _require_admin(actor)

    created, skipped = [], []

    for index, row in enumerate(rows):
        username = (row.get("username") or "").strip()

        if username and User.objects.filter(username=username).exists():
            skipped.append({"row": index, "username": username, "reason": "User already exists"})
            continue

        try:
            with transaction.atomic():
                created.append(create_user_by_admin(actor, row))
        except ValidationError as exc:
            skipped.append({"row": index, "username": username, "reason": exc.messages[0]})
        except AccessDenied as exc:
            skipped.append({"row": index, "username": username, "reason": exc.decision.message})

    logger.info("Bulk import by user %s: %s created, %s skipped", actor.id, len(created), len(skipped))
    return created, skipped


# ============================
# REPORTS
# ============================

def admin_stats(actor):
    _require_admin(actor)

    from courses.models import Course, CourseEnrollment

    users = _scoped_users(actor)
    courses = Course.objects.all()
    enrollments = CourseEnrollment.objects.all()

    if actor.role != GlobalRole.SUPER_ADMIN:
        courses = courses.filter(organization_id=actor.tenant.organization_id)
        enrollments = enrollments.filter(course__organization_id=actor.tenant.organization_id)

    by_role = dict(users.order_by().values_list("role").annotate(total=Count("id")))

    return {
        "total_users": users.count(),
        "users_by_role": {role: by_role.get(role, 0) for role in GlobalRole.values},
        "total_courses": courses.count(),
        "published_courses": courses.filter(published=True).count(),
        "total_enrollments": enrollments.count(),
        "completed_enrollments": enrollments.filter(completed_at__isnull=False).count(),
    }


def progress_report(actor):
    """Per-course enrollment and average progress inside the admin's scope."""
    _require_admin(actor)

    from courses.models import Course

    courses = Course.objects.all()
    if actor.role != GlobalRole.SUPER_ADMIN:
        courses = courses.filter(organization_id=actor.tenant.organization_id)

    rows = courses.annotate(
        enrolled=Count("enrollments"),
        completed=Count("enrollments", filter=Q(enrollments__completed_at__isnull=False)),
        average_progress=Avg("enrollments__progress"),
    ).order_by("title")

    return [
        {
            "course_id": course.pk,
            "title": course.title,
            "enrolled": course.enrolled,
            "completed": course.completed,
            "average_progress": round(course.average_progress or 0, 1),
        }
        for course in rows
    ]


# ============================
# INSTRUCTOR REQUESTS
# ============================

def list_instructor_requests(actor, status=InstructorRequest.STATUS_PENDING):
    _require_admin(actor)

    requests = InstructorRequest.objects.select_related("user")
    if status:
        requests = requests.filter(status=status)

    if actor.role != GlobalRole.SUPER_ADMIN:
        requests = requests.filter(user__organization_id=actor.tenant.organization_id)

    return requests


def review_instructor_request(actor, instructor_request, approve):
    if instructor_request.status != InstructorRequest.STATUS_PENDING:
        raise ValidationError("This request has already been reviewed.")

    applicant = instructor_request.user
    _require_on_user(actor, applicant)

    with transaction.atomic():
        instructor_request.status = (
            InstructorRequest.STATUS_APPROVED if approve else InstructorRequest.STATUS_REJECTED
        )
        instructor_request.reviewed_by_id = actor.id
        instructor_request.reviewed_at = timezone.now()
        instructor_request.save(update_fields=["status", "reviewed_by", "reviewed_at"])

        if approve and applicant.role == GlobalRole.STUDENT:
            applicant.role = GlobalRole.INSTRUCTOR
            applicant.save(update_fields=["role"])

    logger.info(
        "Instructor request %s %s by user %s",
        instructor_request.pk,
        instructor_request.status,
        actor.id,
    )
    return instructor_request
