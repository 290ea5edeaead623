import logging

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from accounts.services.identity import build_actor
from core.exceptions import AccessDenied, OrganizationNotFound
from organizations.permissions import DenyReason

logger = logging.getLogger(__name__)


def request_actor(request):
    """
    The actor set by ActiveTenantMiddleware. Falls back to building it when
    DRF authenticated the user after the middleware ran.
    """
    actor = getattr(request, "actor", None)
    if actor is None and request.user.is_authenticated:
        actor = build_actor(request.user)
        request.actor = actor
    return actor


def forbidden(decision):
    """
    HTTP form of a deny decision. A missing organization is a data problem,
    not a permission one, so it is reported as a bad request.
    """
    if decision.reason == DenyReason.ORGANIZATION_NOT_FOUND:
        return bad_request(decision.message, reason=str(decision.reason))

    return Response(
        {"message": decision.message, "reason": str(decision.reason)},
        status=status.HTTP_403_FORBIDDEN,
    )


def bad_request(message, **extra):
    return Response({"message": message, **extra}, status=status.HTTP_400_BAD_REQUEST)


def validation_message(exc):
    if hasattr(exc, "message_dict"):
        field, messages = next(iter(exc.message_dict.items()))
        return f"{field}: {messages[0]}"
    return exc.messages[0] if exc.messages else "Invalid input"


def exception_handler(exc, context):
    if isinstance(exc, AccessDenied):
        return forbidden(exc.decision)

    if isinstance(exc, OrganizationNotFound):
        logger.warning("Request rejected, organization %s not found", exc.organization_id)
        return bad_request(str(exc), reason=str(DenyReason.ORGANIZATION_NOT_FOUND))

    if isinstance(exc, ValidationError):
        return bad_request(validation_message(exc))

    response = drf_exception_handler(exc, context)

    if response is not None and isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"message": str(response.data["detail"])}

    return response
