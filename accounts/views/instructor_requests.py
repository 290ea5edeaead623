from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import InstructorRequest
from accounts.models.user import GlobalRole
from accounts.serializers import InstructorRequestReviewSerializer, InstructorRequestSerializer
from accounts.services import administration
from accounts.services.onboarding import submit_instructor_request
from core.http import request_actor
from organizations.decorators import tenant_role_required


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def apply_to_teach(request):
    serializer = InstructorRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    instructor_request = submit_instructor_request(
        request.user,
        serializer.validated_data["bio"],
        serializer.validated_data.get("linkedin_url", ""),
    )
    return Response(
        InstructorRequestSerializer(instructor_request).data,
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN)
def request_list(request):
    requests = administration.list_instructor_requests(
        request_actor(request),
        status=request.query_params.get("status", InstructorRequest.STATUS_PENDING),
    )
    return Response(InstructorRequestSerializer(requests, many=True).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@tenant_role_required(GlobalRole.ORG_ADMIN)
def request_review(request, pk):
    instructor_request = get_object_or_404(
        InstructorRequest.objects.select_related("user"),
        pk=pk,
    )

    serializer = InstructorRequestReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    reviewed = administration.review_instructor_request(
        request_actor(request),
        instructor_request,
        serializer.validated_data["approve"],
    )
    return Response(InstructorRequestSerializer(reviewed).data)
