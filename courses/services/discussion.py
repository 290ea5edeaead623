import logging

from django.core.exceptions import ValidationError
from django.db.models import Prefetch

from core.exceptions import AccessDenied
from courses.models import LessonComment
from courses.services.permissions import check_course
from organizations.permissions import Action

logger = logging.getLogger(__name__)


def _require(actor, course, action):
    decision = check_course(actor, course, action)
    if not decision:
        raise AccessDenied(decision)


def list_comments(actor, lesson):
    """
    Top-level comments, newest first, each with its replies oldest first.
    """
    _require(actor, lesson.module.course, Action.VIEW)

    replies = LessonComment.objects.select_related("user").order_by("created_at", "id")
    return (
        LessonComment.objects
        .filter(lesson=lesson, parent__isnull=True)
        .select_related("user")
        .prefetch_related(Prefetch("replies", queryset=replies))
        .order_by("-created_at", "-id")
    )


def post_comment(actor, user, lesson, content, parent_id=None):
    _require(actor, lesson.module.course, Action.VIEW)

    content = (content or "").strip()
    if not content:
        raise ValidationError("A comment cannot be empty.")

    parent = None
    if parent_id is not None:
        parent = LessonComment.objects.filter(pk=parent_id, lesson=lesson).first()
        if parent is None:
            raise ValidationError("The comment being replied to is not on this lesson.")

        # One level of threading; a reply to a reply joins the same thread
        if parent.parent_id is not None:
            parent = parent.parent

    return LessonComment.objects.create(lesson=lesson, user=user, parent=parent, content=content)


def delete_comment(actor, comment):
    """
    Authors remove their own comments; course staff with the grade
    permission (and admins by precedence) moderate the rest.
    """
    if comment.user_id != actor.id:
        _require(actor, comment.lesson.module.course, Action.GRADE)

    logger.info("Comment %s on lesson %s deleted by user %s", comment.pk, comment.lesson_id, actor.id)
    comment.delete()
