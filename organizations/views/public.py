from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from organizations.models import Organization
from organizations.serializers import OrganizationSerializer


@api_view(["GET"])
@permission_classes([AllowAny])
def org_public_page(request, slug):
    """
    Public organization landing data.
    Accessible without login; inactive organizations are not found.
    """
    organization = get_object_or_404(
        Organization.objects.active(),
        slug=slug,
    )

    return Response(OrganizationSerializer(organization).data)
