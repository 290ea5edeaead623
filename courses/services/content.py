from django.db import transaction

from core.exceptions import AccessDenied
from courses.models import Course, CourseModule, Lesson
from courses.services.permissions import check_course
from organizations.permissions import Action


def _require_edit(actor, course):
    decision = check_course(actor, course, Action.EDIT)
    if not decision:
        raise AccessDenied(decision)


def course_outline(course):
    return (
        course.modules
        .prefetch_related("lessons")
        .order_by("order")
    )


def create_module(actor, course, title, order=None):
    _require_edit(actor, course)

    # Atomic to prevent duplicate order issues
    with transaction.atomic():
        # Lock the course row while the next order number is picked
        Course.objects.select_for_update().get(pk=course.pk)
        module = CourseModule(course=course, title=title, order=order)
        module.full_clean(exclude=None if order else ["order"])
        module.save()

    return module


def update_module(actor, module, data):
    _require_edit(actor, module.course)

    for field in ("title", "order"):
        if field in data:
            setattr(module, field, data[field])

    module.full_clean()
    module.save()
    return module


def delete_module(actor, module):
    _require_edit(actor, module.course)
    module.delete()


def create_lesson(actor, module, data):
    _require_edit(actor, module.course)

    with transaction.atomic():
        lesson = Lesson(
            module=module,
            title=data["title"],
            lesson_type=data["lesson_type"],
            order=data.get("order"),
            content_url=data.get("content_url", ""),
            text_content=data.get("text_content", ""),
        )
        lesson.full_clean(exclude=None if lesson.order else ["order"])
        lesson.save()

    return lesson


def update_lesson(actor, lesson, data):
    _require_edit(actor, lesson.module.course)

    for field in ("title", "lesson_type", "order", "content_url", "text_content"):
        if field in data:
            setattr(lesson, field, data[field])

    lesson.full_clean()
    lesson.save()
    return lesson


def delete_lesson(actor, lesson):
    _require_edit(actor, lesson.module.course)
    lesson.delete()
