from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase

from accounts.models import GlobalRole
from accounts.services.identity import INDEPENDENT, Actor, TenantRef
from core.tests.factories import actor, add_staff, make_course, make_org, make_user
from courses.models import CourseRole
from courses.services.visibility import (
    VisibilityScope,
    filter_courses,
    resolve_visibility,
    visible_courses,
)
from organizations.models import Organization
from organizations.permissions import DenyReason


def fake_course(pk, organization_id, instructor_id=1, published=True, is_public=False):
    return SimpleNamespace(
        pk=pk,
        organization_id=organization_id,
        instructor_id=instructor_id,
        published=published,
        is_public=is_public,
    )


class ResolveVisibilityTests(SimpleTestCase):

    def test_branches(self):
        cases = [
            (Actor(1, GlobalRole.STUDENT, INDEPENDENT), VisibilityScope.MARKETPLACE),
            (Actor(1, GlobalRole.INSTRUCTOR, INDEPENDENT), VisibilityScope.MARKETPLACE),
            (Actor(1, GlobalRole.ORG_ADMIN, TenantRef(5)), VisibilityScope.TENANT_ALL),
            (Actor(1, GlobalRole.INSTRUCTOR, TenantRef(5)), VisibilityScope.TENANT_STAFFED),
            (Actor(1, GlobalRole.TA, TenantRef(5)), VisibilityScope.TENANT_STAFFED),
            (Actor(1, GlobalRole.CO_INSTRUCTOR, TenantRef(5)), VisibilityScope.TENANT_STAFFED),
            (Actor(1, GlobalRole.STUDENT, TenantRef(5)), VisibilityScope.TENANT_PUBLISHED),
        ]
        for subject, scope in cases:
            with self.subTest(role=subject.role, tenant=str(subject.tenant)):
                self.assertEqual(resolve_visibility(subject).scope, scope)

    def test_unresolved_tenant_fails_closed(self):
        visibility = resolve_visibility(Actor(1, GlobalRole.STUDENT, TenantRef(5, resolved=False)))

        self.assertFalse(visibility.ok)
        self.assertEqual(visibility.error, DenyReason.ORGANIZATION_NOT_FOUND)
        self.assertEqual(filter_courses(visibility, [fake_course(1, 5)]), [])

    def test_in_memory_filter(self):
        courses = [
            fake_course(1, 5, instructor_id=1, published=False),
            fake_course(2, 5, instructor_id=2),
            fake_course(3, 5, instructor_id=2, published=False),
            fake_course(4, 6, instructor_id=1),
            fake_course(5, 9, is_public=True),
        ]

        staffed = resolve_visibility(Actor(1, GlobalRole.INSTRUCTOR, TenantRef(5)))
        self.assertEqual([c.pk for c in filter_courses(staffed, courses, [3])], [1, 3])

        published = resolve_visibility(Actor(1, GlobalRole.STUDENT, TenantRef(5)))
        self.assertEqual([c.pk for c in filter_courses(published, courses)], [2])

        marketplace = resolve_visibility(Actor(1, GlobalRole.STUDENT, INDEPENDENT))
        self.assertEqual([c.pk for c in filter_courses(marketplace, courses)], [5])


class VisibleCoursesTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.marketplace = Organization.objects.marketplace()
        cls.acme = make_org("Acme")
        cls.globex = make_org("Globex")

        cls.freelancer = make_user("freelancer", role=GlobalRole.INSTRUCTOR)
        cls.acme_instructor = make_user("acme-tutor", role=GlobalRole.INSTRUCTOR, organization=cls.acme)
        cls.acme_colleague = make_user("acme-colleague", role=GlobalRole.INSTRUCTOR, organization=cls.acme)
        cls.acme_ta = make_user("acme-ta", role=GlobalRole.TA, organization=cls.acme)
        cls.acme_admin = make_user("acme-admin", role=GlobalRole.ORG_ADMIN, organization=cls.acme)
        cls.acme_student = make_user("acme-student", organization=cls.acme)
        cls.globex_instructor = make_user("globex-tutor", role=GlobalRole.INSTRUCTOR, organization=cls.globex)

        cls.public_course = make_course(cls.freelancer, "Marketplace", published=True, is_public=True)
        cls.public_draft = make_course(cls.freelancer, "Marketplace draft", is_public=True)
        cls.acme_published = make_course(cls.acme_instructor, "Acme published", published=True)
        cls.acme_draft = make_course(cls.acme_instructor, "Acme draft")
        cls.acme_other = make_course(cls.acme_colleague, "Acme other", published=True)
        cls.globex_course = make_course(cls.globex_instructor, "Globex", published=True)

        add_staff(cls.acme_draft, cls.acme_ta, CourseRole.TA)

    def titles(self, user):
        courses, _ = visible_courses(actor(user))
        return set(courses.values_list("title", flat=True))

    def test_independent_sees_marketplace_catalog(self):
        independent = make_user("walk-in")
        self.assertEqual(self.titles(independent), {"Marketplace"})

    def test_marketplace_member_sees_the_same_catalog(self):
        member = make_user("member", organization=self.marketplace)
        self.assertEqual(self.titles(member), self.titles(make_user("walk-in")))

    def test_org_admin_sees_whole_tenant(self):
        self.assertEqual(self.titles(self.acme_admin), {"Acme published", "Acme draft", "Acme other"})

    def test_instructor_sees_owned_and_staffed(self):
        self.assertEqual(self.titles(self.acme_instructor), {"Acme published", "Acme draft"})
        self.assertEqual(self.titles(self.acme_ta), {"Acme draft"})

    def test_student_sees_published_tenant_courses(self):
        self.assertEqual(self.titles(self.acme_student), {"Acme published", "Acme other"})

    def test_tenants_are_isolated(self):
        self.assertEqual(self.titles(self.globex_instructor), {"Globex"})

    def test_missing_organization_lists_nothing(self):
        self.acme.is_active = False
        self.acme.save()

        courses, visibility = visible_courses(actor(self.acme_student))

        self.assertFalse(visibility.ok)
        self.assertEqual(courses.count(), 0)
