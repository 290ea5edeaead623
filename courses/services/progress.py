from courses.models import Lesson, LessonProgress


def get_course_progress(user, course):
    """
    Returns (completed_count, total_count, percentage)
    """

    lessons = Lesson.objects.filter(module__course=course)
    total = lessons.count()

    if total == 0:
        return 0, 0, 0

    completed = LessonProgress.objects.filter(
        user=user,
        lesson__in=lessons,
        completed=True
    ).count()

    percentage = int((completed / total) * 100)

    return completed, total, percentage


def completed_lesson_ids(user, course):
    return list(
        LessonProgress.objects.filter(
            user=user,
            completed=True,
            lesson__module__course=course
        ).values_list("lesson_id", flat=True)
    )


def get_resume_lesson(user, course):
    """
    Returns:
    - First incomplete lesson if exists
    - Otherwise FIRST lesson of the course
    """

    lessons = (
        Lesson.objects
        .filter(module__course=course)
        .order_by("module__order", "order")
    )

    lesson = lessons.exclude(id__in=completed_lesson_ids(user, course)).first()

    if lesson:
        return lesson

    return lessons.first()
