from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework.exceptions import NotFound

from core.exceptions import AccessDenied, OrganizationNotFound
from core.http import exception_handler
from core.tests.factories import make_user
from organizations.models import Organization
from organizations.permissions import DenyReason, deny


class ExceptionHandlerTests(SimpleTestCase):

    def test_deny_is_forbidden_with_reason(self):
        response = exception_handler(AccessDenied(deny(DenyReason.CROSS_TENANT)), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["reason"], "CrossTenant")
        self.assertEqual(response.data["message"], "This resource belongs to another organization.")

    def test_missing_organization_decision_is_bad_request(self):
        response = exception_handler(AccessDenied(deny(DenyReason.ORGANIZATION_NOT_FOUND)), {})
        self.assertEqual(response.status_code, 400)

    def test_organization_not_found(self):
        response = exception_handler(OrganizationNotFound(42), {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["reason"], "OrganizationNotFound")

    def test_validation_error(self):
        response = exception_handler(ValidationError("Invalid Access Code"), {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"message": "Invalid Access Code"})

    def test_field_validation_error(self):
        response = exception_handler(ValidationError({"title": ["This field cannot be blank."]}), {})
        self.assertEqual(response.data["message"], "title: This field cannot be blank.")

    def test_drf_detail_becomes_message(self):
        response = exception_handler(NotFound("Gone"), {})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"message": "Gone"})


class HealthCheckTests(TestCase):

    def setUp(self):
        self.staff = make_user("ops", is_staff=True)

    def test_requires_staff(self):
        response = self.client.get(reverse("core:health"))
        self.assertEqual(response.status_code, 302)

    def test_missing_marketplace_is_degraded(self):
        self.client.force_login(self.staff)

        response = self.client.get(reverse("core:health"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["marketplace"], "missing")

    def test_ok(self):
        Organization.objects.marketplace()
        self.client.force_login(self.staff)

        response = self.client.get(reverse("core:health"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["db"], "ok")
