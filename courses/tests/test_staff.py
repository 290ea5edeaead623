from django.core.exceptions import ValidationError
from django.test import TestCase

from accounts.models import GlobalRole
from core.exceptions import AccessDenied
from core.tests.factories import actor, make_course, make_org, make_user
from courses.models import CourseRole, CourseStaff
from courses.services.staff import add_staff, list_staff, remove_staff
from organizations.models import Organization
from organizations.permissions import DenyReason


class CourseTeamTests(TestCase):

    def setUp(self):
        self.acme = make_org("Acme")
        self.owner = make_user("owner", role=GlobalRole.INSTRUCTOR, organization=self.acme)
        self.colleague = make_user("colleague", role=GlobalRole.INSTRUCTOR, organization=self.acme)
        self.assistant = make_user("assistant", role=GlobalRole.TA, organization=self.acme)
        self.course = make_course(self.owner, "Welding")

    def test_owner_builds_the_team(self):
        add_staff(actor(self.owner), self.course.pk, self.colleague, CourseRole.CO_INSTRUCTOR)
        add_staff(actor(self.owner), self.course.pk, self.assistant, CourseRole.TA)

        team = list_staff(actor(self.owner), self.course)

        self.assertEqual(team[0]["user"], self.owner)
        self.assertTrue(team[0]["is_owner"])
        self.assertEqual(team[0]["role"], "instructor")
        self.assertEqual(
            {(member["user"].username, member["role"]) for member in team[1:]},
            {("colleague", "co-instructor"), ("assistant", "ta")},
        )

    def test_adding_again_changes_the_role(self):
        add_staff(actor(self.owner), self.course.pk, self.colleague, CourseRole.TA)
        add_staff(actor(self.owner), self.course.pk, self.colleague, CourseRole.CO_INSTRUCTOR)

        member = CourseStaff.objects.get(course=self.course, user=self.colleague)
        self.assertEqual(member.role, CourseRole.CO_INSTRUCTOR)

    def test_instructor_role_cannot_be_assigned(self):
        with self.assertRaises(ValidationError):
            add_staff(actor(self.owner), self.course.pk, self.colleague, CourseRole.INSTRUCTOR)

        self.assertFalse(CourseStaff.objects.exists())

    def test_owner_cannot_be_added(self):
        with self.assertRaises(ValidationError):
            add_staff(actor(self.owner), self.course.pk, self.owner, CourseRole.TA)

    def test_staff_must_share_the_tenant(self):
        outsider = make_user("outsider", role=GlobalRole.INSTRUCTOR, organization=make_org("Globex"))
        freelancer = make_user("freelancer", role=GlobalRole.INSTRUCTOR)

        for user in (outsider, freelancer):
            with self.assertRaises(ValidationError):
                add_staff(actor(self.owner), self.course.pk, user, CourseRole.TA)

    def test_member_of_deactivated_organization_is_refused(self):
        root = make_user("root", role=GlobalRole.SUPER_ADMIN)
        self.acme.is_active = False
        self.acme.save()

        with self.assertRaises(ValidationError):
            add_staff(actor(root), self.course.pk, self.assistant, CourseRole.TA)

        with self.assertRaises(AccessDenied):
            add_staff(actor(self.owner), self.course.pk, self.assistant, CourseRole.TA)

    def test_independent_course_takes_independent_staff(self):
        Organization.objects.marketplace()
        freelancer = make_user("freelancer", role=GlobalRole.INSTRUCTOR)
        helper = make_user("helper")
        course = make_course(freelancer, "Indie")

        member = add_staff(actor(freelancer), course.pk, helper, CourseRole.TA)

        self.assertEqual(member.user, helper)

    def test_co_instructor_cannot_manage_team(self):
        CourseStaff.objects.create(course=self.course, user=self.colleague, role=CourseRole.CO_INSTRUCTOR)

        with self.assertRaises(AccessDenied) as ctx:
            add_staff(actor(self.colleague), self.course.pk, self.assistant, CourseRole.TA)

        self.assertEqual(ctx.exception.decision.reason, DenyReason.INSUFFICIENT_ROLE)

    def test_org_admin_manages_any_tenant_team(self):
        admin = make_user("admin", role=GlobalRole.ORG_ADMIN, organization=self.acme)

        add_staff(actor(admin), self.course.pk, self.assistant, CourseRole.TA)

        self.assertTrue(CourseStaff.objects.filter(user=self.assistant).exists())

    def test_remove(self):
        CourseStaff.objects.create(course=self.course, user=self.assistant, role=CourseRole.TA)

        self.assertTrue(remove_staff(actor(self.owner), self.course.pk, self.assistant.pk))
        self.assertFalse(remove_staff(actor(self.owner), self.course.pk, self.assistant.pk))
