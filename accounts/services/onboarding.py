import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from accounts.models import GlobalRole, InstructorRequest
from accounts.services.identity import tenant_for_user
from organizations.models import Organization

logger = logging.getLogger(__name__)

User = get_user_model()


def register_user(*, username, email, password, access_code=None, first_name="", last_name=""):
    """
    Self-service sign up. A valid access code joins that organization,
    no code makes the user independent. Role is always student.
    """
    organization = None

    if access_code:
        organization = Organization.objects.by_access_code(access_code)
        if organization is None:
            raise ValidationError("Invalid Access Code")

    if User.objects.filter(username=username).exists():
        raise ValidationError("User already exists")

    validate_password(password)

    user = User.objects.create_user(
        username=username,
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        role=GlobalRole.STUDENT,
        organization=organization,
    )

    logger.info(
        "Registered user %s (%s)",
        user.pk,
        organization.slug if organization else "independent",
    )
    return user


def join_organization(user, access_code):
    """
    Lets an independent user attach themselves to a tenant with its code.
    Moving between tenants is an admin operation.
    """
    if not tenant_for_user(user).is_independent:
        raise ValidationError("You already belong to an organization.")

    organization = Organization.objects.by_access_code(access_code)
    if organization is None:
        raise ValidationError("Invalid Access Code")

    from courses.services.catalog import regate_owned_courses

    with transaction.atomic():
        user.organization = organization
        user.save(update_fields=["organization"])
        regate_owned_courses(user)

    logger.info("User %s joined organization %s", user.pk, organization.slug)
    return user


def submit_instructor_request(user, bio, linkedin_url=""):
    if user.role != GlobalRole.STUDENT:
        raise ValidationError("Only students can apply to teach.")

    if InstructorRequest.objects.filter(user=user, status=InstructorRequest.STATUS_PENDING).exists():
        raise ValidationError("You already have a pending request.")

    if not bio or not bio.strip():
        raise ValidationError("Tell us a little about yourself.")

    return InstructorRequest.objects.create(
        user=user,
        bio=bio.strip(),
        linkedin_url=linkedin_url or "",
    )
