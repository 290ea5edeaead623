from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import GlobalRole
from core.exceptions import AccessDenied
from core.tests.factories import actor, add_lessons, add_staff, enroll, make_course, make_org, make_user
from courses.models import CourseRole, LessonComment
from courses.services.discussion import delete_comment, list_comments, post_comment
from organizations.permissions import DenyReason


class DiscussionTestCase(TestCase):

    def setUp(self):
        self.acme = make_org("Acme")
        self.tutor = make_user("tutor", role=GlobalRole.INSTRUCTOR, organization=self.acme)
        self.ta = make_user("ta", role=GlobalRole.TA, organization=self.acme)
        self.alice = make_user("alice", organization=self.acme)
        self.bob = make_user("bob", organization=self.acme)

        self.course = make_course(self.tutor, "Chemistry", published=True)
        add_staff(self.course, self.ta, CourseRole.TA)
        (self.lesson,) = add_lessons(self.course, count=1)
        enroll(self.alice, self.course)


class PostAndListTests(DiscussionTestCase):

    def test_threads(self):
        question = post_comment(actor(self.alice), self.alice, self.lesson, "Why does it fizz?")
        answer = post_comment(actor(self.ta), self.ta, self.lesson, "Carbon dioxide.", question.pk)
        follow_up = post_comment(actor(self.alice), self.alice, self.lesson, "Thanks!", answer.pk)
        later = post_comment(actor(self.bob), self.bob, self.lesson, "Is this on the exam?")

        threads = list(list_comments(actor(self.alice), self.lesson))

        self.assertEqual(threads, [later, question])
        self.assertEqual(list(threads[1].replies.all()), [answer, follow_up])
        self.assertEqual(follow_up.parent, question)

    def test_content_is_required(self):
        with self.assertRaises(ValidationError):
            post_comment(actor(self.alice), self.alice, self.lesson, "   ")

    def test_parent_must_be_on_the_same_lesson(self):
        other_course = make_course(self.tutor, "Physics", published=True)
        (other_lesson,) = add_lessons(other_course, count=1)
        elsewhere = post_comment(actor(self.alice), self.alice, other_lesson, "Hello")

        with self.assertRaises(ValidationError):
            post_comment(actor(self.alice), self.alice, self.lesson, "Reply", elsewhere.pk)

    def test_other_tenant_cannot_read_or_post(self):
        outsider = make_user("outsider", organization=make_org("Globex"))

        with self.assertRaises(AccessDenied) as ctx:
            list_comments(actor(outsider), self.lesson)
        self.assertEqual(ctx.exception.decision.reason, DenyReason.CROSS_TENANT)

        with self.assertRaises(AccessDenied):
            post_comment(actor(outsider), outsider, self.lesson, "Let me in")

        self.assertFalse(LessonComment.objects.exists())

    def test_draft_course_is_closed_to_students(self):
        draft = make_course(self.tutor, "Draft")
        (lesson,) = add_lessons(draft, count=1)

        with self.assertRaises(AccessDenied):
            list_comments(actor(self.bob), lesson)


class DeleteTests(DiscussionTestCase):

    def setUp(self):
        super().setUp()
        self.comment = post_comment(actor(self.alice), self.alice, self.lesson, "First!")

    def test_author(self):
        delete_comment(actor(self.alice), self.comment)
        self.assertFalse(LessonComment.objects.exists())

    def test_course_ta_moderates(self):
        delete_comment(actor(self.ta), self.comment)
        self.assertFalse(LessonComment.objects.exists())

    def test_classmate_cannot(self):
        with self.assertRaises(AccessDenied):
            delete_comment(actor(self.bob), self.comment)

        self.assertTrue(LessonComment.objects.exists())

    def test_global_ta_of_another_course_cannot(self):
        # Staff rights come from the course team, not the global role
        stranger_ta = make_user("stranger-ta", role=GlobalRole.TA, organization=self.acme)

        with self.assertRaises(AccessDenied):
            delete_comment(actor(stranger_ta), self.comment)

    def test_deleting_a_thread_removes_replies(self):
        post_comment(actor(self.ta), self.ta, self.lesson, "Welcome", self.comment.pk)

        delete_comment(actor(self.alice), self.comment)

        self.assertFalse(LessonComment.objects.exists())


class DiscussionApiTests(APITestCase):

    def setUp(self):
        self.acme = make_org("Acme")
        self.tutor = make_user("tutor", role=GlobalRole.INSTRUCTOR, organization=self.acme)
        self.student = make_user("student", organization=self.acme)
        self.course = make_course(self.tutor, "Chemistry", published=True)
        (self.lesson,) = add_lessons(self.course, count=1)

    def test_post_reply_and_list(self):
        self.client.force_login(self.student)
        url = reverse("courses:lesson_comments", args=[self.lesson.pk])

        question = self.client.post(url, {"content": "Why?"}, format="json")
        self.client.force_login(self.tutor)
        reply = self.client.post(url, {"content": "Because.", "parent_id": question.data["id"]}, format="json")
        listing = self.client.get(url)

        self.assertEqual(question.status_code, status.HTTP_201_CREATED)
        self.assertEqual(reply.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(listing.data), 1)
        self.assertEqual(listing.data[0]["user"]["username"], "student")
        self.assertEqual([r["content"] for r in listing.data[0]["replies"]], ["Because."])

    def test_delete_someone_elses_comment_is_forbidden(self):
        comment = LessonComment.objects.create(lesson=self.lesson, user=self.tutor, content="Read chapter 2")
        self.client.force_login(self.student)

        response = self.client.delete(reverse("courses:comment_detail", args=[comment.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["reason"], "InsufficientRole")
