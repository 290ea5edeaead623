"""Small builders shared by the app test suites."""
from django.contrib.auth import get_user_model
from django.utils.text import slugify

from accounts.models import GlobalRole
from accounts.services.identity import build_actor
from courses.models import Course, CourseEnrollment, CourseModule, CourseStaff, Lesson
from organizations.models import Organization

User = get_user_model()

PASSWORD = "correct-horse-battery-42"


def make_org(name, **kwargs):
    kwargs.setdefault("slug", slugify(name))
    return Organization.objects.create(name=name, **kwargs)


def make_user(username, role=GlobalRole.STUDENT, organization=None, **kwargs):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=PASSWORD,
        role=role,
        organization=organization,
        **kwargs,
    )


def make_course(instructor, title="Course", organization=None, **kwargs):
    if organization is None:
        organization = instructor.organization or Organization.objects.marketplace()
    return Course.objects.create(
        title=title,
        instructor=instructor,
        organization=organization,
        **kwargs,
    )


def add_lessons(course, count=2):
    module = CourseModule.objects.create(course=course, title="Module 1")
    return [
        Lesson.objects.create(
            module=module,
            title=f"Lesson {index}",
            lesson_type=Lesson.TYPE_VIDEO,
            content_url=f"https://videos.example.com/{course.pk}/{index}.mp4",
        )
        for index in range(1, count + 1)
    ]


def add_staff(course, user, role):
    return CourseStaff.objects.create(course=course, user=user, role=role)


def enroll(user, course):
    return CourseEnrollment.objects.create(user=user, course=course)


def actor(user):
    return build_actor(user)
