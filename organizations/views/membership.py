from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.serializers import UserSerializer
from accounts.services.identity import build_actor, current_marketplace_id, tenant_from_id
from accounts.services.onboarding import join_organization
from core.exceptions import AccessDenied, OrganizationNotFound
from core.http import request_actor
from organizations.decorators import tenant_role_required
from organizations.models import Organization
from organizations.permissions import (
    Action,
    ResourceContext,
    ResourceKind,
    can,
)
from organizations.serializers import (
    JoinOrganizationSerializer,
    OrganizationAdminSerializer,
    OrganizationSerializer,
)


def _organization_context(organization):
    return ResourceContext(tenant=tenant_from_id(organization.pk, current_marketplace_id()))


# ============================
# MEMBER
# ============================

@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_organization(request):
    actor = request_actor(request)

    if actor.tenant.is_independent:
        return Response({"organization": None, "independent": True})

    if not actor.tenant.resolved:
        raise OrganizationNotFound(actor.tenant.organization_id)

    organization = Organization.objects.get(pk=actor.tenant.organization_id)
    decision = can(actor, Action.EDIT, ResourceKind.ORGANIZATION, _organization_context(organization))
    serializer = OrganizationAdminSerializer if decision else OrganizationSerializer

    return Response({"organization": serializer(organization).data, "independent": False})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def join(request):
    serializer = JoinOrganizationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = join_organization(request.user, serializer.validated_data["access_code"])
    request.actor = build_actor(user)

    return Response(UserSerializer(user).data)


# ============================
# ADMINISTRATION
# ============================

@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@tenant_role_required()
def organization_list(request):
    """Every organization; super_admin only."""
    if request.method == "POST":
        serializer = OrganizationAdminSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        organization = serializer.save()
        return Response(OrganizationAdminSerializer(organization).data, status=201)

    organizations = Organization.objects.all()
    return Response(OrganizationAdminSerializer(organizations, many=True).data)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
def organization_update(request, pk):
    actor = request_actor(request)
    organization = get_object_or_404(Organization, pk=pk)

    decision = can(actor, Action.EDIT, ResourceKind.ORGANIZATION, _organization_context(organization))
    if not decision:
        raise AccessDenied(decision)

    serializer = OrganizationAdminSerializer(organization, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()

    return Response(serializer.data)
