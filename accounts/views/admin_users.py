from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models.user import GlobalRole
from accounts.serializers import (
    AdminUserCreateSerializer,
    BulkImportSerializer,
    OrganizationAssignSerializer,
    RoleUpdateSerializer,
    UserSerializer,
)
from accounts.services import administration
from core.http import request_actor
from organizations.decorators import tenant_role_required

User = get_user_model()


# ============================
# USERS
# ============================

@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN, GlobalRole.INSTRUCTOR)
def user_list(request):
    actor = request_actor(request)

    if request.method == "POST":
        serializer = AdminUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = administration.create_user_by_admin(actor, serializer.validated_data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    users = administration.list_users(actor, search=request.query_params.get("search"))
    return Response(UserSerializer(users, many=True).data)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN)
def user_role(request, pk):
    target = get_object_or_404(User, pk=pk)

    serializer = RoleUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = administration.update_user_role(
        request_actor(request), target, serializer.validated_data["role"]
    )
    return Response(UserSerializer(user).data)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
@tenant_role_required()
def user_organization(request, pk):
    target = get_object_or_404(User, pk=pk)

    serializer = OrganizationAssignSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = administration.reassign_organization(
        request_actor(request), target, serializer.validated_data["organization_id"]
    )
    return Response(UserSerializer(user).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN)
def user_bulk_import(request):
    serializer = BulkImportSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    created, skipped = administration.bulk_import_users(
        request_actor(request), serializer.validated_data["users"]
    )
    return Response(
        {
            "created": UserSerializer(created, many=True).data,
            "skipped": skipped,
        },
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


# ============================
# REPORTS
# ============================

@api_view(["GET"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN)
def stats(request):
    return Response(administration.admin_stats(request_actor(request)))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN)
def progress_report(request):
    return Response(administration.progress_report(request_actor(request)))
