from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import GlobalRole, InstructorRequest
from accounts.services import administration
from accounts.services.onboarding import submit_instructor_request
from core.exceptions import AccessDenied
from core.tests.factories import actor, enroll, make_course, make_org, make_user
from organizations.models import Organization
from organizations.permissions import DenyReason


class AdministrationTestCase(TestCase):

    def setUp(self):
        self.marketplace = Organization.objects.marketplace()
        self.acme = make_org("Acme")
        self.globex = make_org("Globex")

        self.root = make_user("root", role=GlobalRole.SUPER_ADMIN)
        self.acme_admin = make_user("acme-admin", role=GlobalRole.ORG_ADMIN, organization=self.acme)
        self.acme_student = make_user("acme-student", organization=self.acme)
        self.globex_student = make_user("globex-student", organization=self.globex)


class CreateUserTests(AdministrationTestCase):

    def test_org_admin_creates_into_own_tenant(self):
        user = administration.create_user_by_admin(
            actor(self.acme_admin),
            {"username": "new", "role": GlobalRole.INSTRUCTOR, "organization_id": self.globex.pk},
        )

        self.assertEqual(user.organization, self.acme)
        self.assertEqual(user.role, GlobalRole.INSTRUCTOR)
        self.assertFalse(user.has_usable_password())

    def test_org_admin_cannot_create_admins(self):
        for role in (GlobalRole.ORG_ADMIN, GlobalRole.SUPER_ADMIN):
            with self.assertRaises(AccessDenied):
                administration.create_user_by_admin(actor(self.acme_admin), {"username": f"x-{role}", "role": role})

    def test_super_admin_creates_anyone_anywhere(self):
        user = administration.create_user_by_admin(
            actor(self.root),
            {"username": "globex-admin", "role": GlobalRole.ORG_ADMIN, "organization_id": self.globex.pk},
        )

        self.assertEqual(user.organization, self.globex)

    def test_students_cannot_provision(self):
        with self.assertRaises(AccessDenied):
            administration.create_user_by_admin(actor(self.acme_student), {"username": "sneaky"})

    def test_duplicate_username(self):
        with self.assertRaises(ValidationError):
            administration.create_user_by_admin(actor(self.root), {"username": "acme-student"})


class UpdateRoleTests(AdministrationTestCase):

    def test_org_admin_promotes_within_tenant(self):
        user = administration.update_user_role(actor(self.acme_admin), self.acme_student, GlobalRole.INSTRUCTOR)
        self.assertEqual(user.role, GlobalRole.INSTRUCTOR)

    def test_org_admin_cannot_reach_other_tenant(self):
        with self.assertRaises(AccessDenied) as ctx:
            administration.update_user_role(actor(self.acme_admin), self.globex_student, GlobalRole.TA)

        self.assertEqual(ctx.exception.decision.reason, DenyReason.CROSS_TENANT)

    def test_org_admin_cannot_touch_super_admin(self):
        tenant_root = make_user("tenant-root", role=GlobalRole.SUPER_ADMIN, organization=self.acme)

        with self.assertRaises(AccessDenied):
            administration.update_user_role(actor(self.acme_admin), tenant_root, GlobalRole.STUDENT)

        tenant_root.refresh_from_db()
        self.assertEqual(tenant_root.role, GlobalRole.SUPER_ADMIN)

    def test_only_super_admin_grants_super_admin(self):
        with self.assertRaises(AccessDenied):
            administration.update_user_role(actor(self.acme_admin), self.acme_student, GlobalRole.SUPER_ADMIN)

        user = administration.update_user_role(actor(self.root), self.acme_student, GlobalRole.SUPER_ADMIN)
        self.assertEqual(user.role, GlobalRole.SUPER_ADMIN)

    def test_users_cannot_change_their_own_role(self):
        with self.assertRaises(AccessDenied):
            administration.update_user_role(actor(self.acme_student), self.acme_student, GlobalRole.ORG_ADMIN)

    def test_unknown_role(self):
        with self.assertRaises(ValidationError):
            administration.update_user_role(actor(self.root), self.acme_student, "wizard")


class ReassignOrganizationTests(AdministrationTestCase):

    def test_super_admin_only(self):
        with self.assertRaises(AccessDenied):
            administration.reassign_organization(actor(self.acme_admin), self.acme_student, self.globex.pk)

    def test_move_unlists_marketplace_courses(self):
        freelancer = make_user("freelancer", role=GlobalRole.INSTRUCTOR)
        course = make_course(freelancer, "Public", published=True, is_public=True)

        administration.reassign_organization(actor(self.root), freelancer, self.acme.pk)

        course.refresh_from_db()
        freelancer.refresh_from_db()
        self.assertEqual(freelancer.organization, self.acme)
        self.assertFalse(course.is_public)

    def test_move_out_to_independent(self):
        administration.reassign_organization(actor(self.root), self.acme_student, None)

        self.acme_student.refresh_from_db()
        self.assertIsNone(self.acme_student.organization)


class BulkImportTests(AdministrationTestCase):

    def test_duplicates_and_bad_rows_are_skipped(self):
        created, skipped = administration.bulk_import_users(
            actor(self.acme_admin),
            [
                {"username": "one", "email": "one@example.com"},
                {"username": "acme-student"},
                {"username": "boss", "role": GlobalRole.ORG_ADMIN},
                {"username": ""},
                {"username": "two", "role": GlobalRole.TA},
            ],
        )

        self.assertEqual([user.username for user in created], ["one", "two"])
        self.assertEqual([row["row"] for row in skipped], [1, 2, 3])
        self.assertTrue(all(user.organization == self.acme for user in created))


class ListingAndReportTests(AdministrationTestCase):

    def test_org_admin_never_sees_super_admins(self):
        make_user("hidden-root", role=GlobalRole.SUPER_ADMIN, organization=self.acme)

        usernames = set(administration.list_users(actor(self.acme_admin)).values_list("username", flat=True))

        self.assertEqual(usernames, {"acme-admin", "acme-student"})

    def test_super_admin_sees_everyone(self):
        users = administration.list_users(actor(self.root))
        self.assertIn("globex-student", set(users.values_list("username", flat=True)))

    def test_instructor_search_is_tenant_scoped(self):
        tutor = make_user("tutor", role=GlobalRole.INSTRUCTOR, organization=self.acme)

        users = administration.list_users(actor(tutor), search="student")

        self.assertEqual(list(users.values_list("username", flat=True)), ["acme-student"])

    def test_stats_and_progress_are_scoped(self):
        tutor = make_user("tutor", role=GlobalRole.INSTRUCTOR, organization=self.acme)
        course = make_course(tutor, "Acme 101", published=True)
        enroll(self.acme_student, course)
        make_course(make_user("g-tutor", role=GlobalRole.INSTRUCTOR, organization=self.globex), "Globex 101")

        stats = administration.admin_stats(actor(self.acme_admin))
        report = administration.progress_report(actor(self.acme_admin))

        self.assertEqual(stats["total_users"], 3)
        self.assertEqual(stats["users_by_role"][GlobalRole.INSTRUCTOR], 1)
        self.assertEqual(stats["total_courses"], 1)
        self.assertEqual(stats["total_enrollments"], 1)
        self.assertEqual(report, [
            {"course_id": course.pk, "title": "Acme 101", "enrolled": 1, "completed": 0, "average_progress": 0},
        ])

    def test_independent_org_admin_has_nothing_to_administer(self):
        loner = make_user("loner", role=GlobalRole.ORG_ADMIN)

        with self.assertRaises(AccessDenied):
            administration.admin_stats(actor(loner))


class InstructorRequestReviewTests(AdministrationTestCase):

    def test_approve_makes_an_instructor(self):
        request = submit_instructor_request(self.acme_student, "I know things")

        administration.review_instructor_request(actor(self.acme_admin), request, approve=True)

        self.acme_student.refresh_from_db()
        request.refresh_from_db()
        self.assertEqual(self.acme_student.role, GlobalRole.INSTRUCTOR)
        self.assertEqual(request.status, InstructorRequest.STATUS_APPROVED)
        self.assertEqual(request.reviewed_by, self.acme_admin)

    def test_other_tenant_admin_cannot_review(self):
        request = submit_instructor_request(self.globex_student, "Hire me")

        with self.assertRaises(AccessDenied):
            administration.review_instructor_request(actor(self.acme_admin), request, approve=True)

        self.assertEqual(
            list(administration.list_instructor_requests(actor(self.acme_admin))),
            [],
        )

    def test_reject_and_no_second_review(self):
        request = submit_instructor_request(self.acme_student, "Maybe")

        administration.review_instructor_request(actor(self.root), request, approve=False)

        with self.assertRaises(ValidationError):
            administration.review_instructor_request(actor(self.root), request, approve=True)

        self.acme_student.refresh_from_db()
        self.assertEqual(self.acme_student.role, GlobalRole.STUDENT)


class AdminApiTests(APITestCase):

    def setUp(self):
        self.acme = make_org("Acme")
        self.admin = make_user("admin", role=GlobalRole.ORG_ADMIN, organization=self.acme)
        self.student = make_user("student", organization=self.acme)

    def test_students_are_forbidden(self):
        self.client.force_login(self.student)

        response = self.client.get(reverse("accounts:users"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["reason"], "InsufficientRole")

    def test_org_admin_changes_a_role(self):
        self.client.force_login(self.admin)

        response = self.client.patch(
            reverse("accounts:user-role", args=[self.student.pk]),
            {"role": "ta"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["role"], "ta")

    def test_org_admin_cannot_reassign_organizations(self):
        self.client.force_login(self.admin)

        response = self.client.patch(
            reverse("accounts:user-organization", args=[self.student.pk]),
            {"organization_id": None},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_organization_is_bad_request(self):
        Organization.objects.filter(pk=self.acme.pk).update(is_active=False)
        self.client.force_login(self.admin)

        response = self.client.get(reverse("accounts:stats"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
