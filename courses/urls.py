from django.urls import path

from courses.views import api_views

app_name = "courses"

urlpatterns = [

    # ================= CATALOG =================

    path("courses/", api_views.course_list, name="course_list"),
    path("courses/<int:pk>/", api_views.course_detail, name="course_detail"),

    # ================= TEAM =================

    path("courses/<int:pk>/staff/", api_views.course_staff, name="course_staff"),
    path(
        "courses/<int:pk>/staff/<int:user_id>/",
        api_views.course_staff_member,
        name="course_staff_member",
    ),

    # ================= CONTENT =================

    path("courses/<int:pk>/modules/", api_views.module_create, name="module_create"),
    path("modules/<int:module_id>/", api_views.module_detail, name="module_detail"),
    path("modules/<int:module_id>/lessons/", api_views.lesson_create, name="lesson_create"),
    path("lessons/<int:lesson_id>/", api_views.lesson_detail, name="lesson_detail"),

    # ================= LEARNING =================

    path("courses/<int:pk>/enroll/", api_views.course_enroll, name="course_enroll"),
    path("enrollments/", api_views.my_enrollments, name="my_enrollments"),
    path("lessons/<int:lesson_id>/complete/", api_views.lesson_complete, name="lesson_complete"),
    path(
        "certificates/<str:certificate_id>/",
        api_views.certificate_detail,
        name="certificate_detail",
    ),

    # ================= DISCUSSION =================

    path("lessons/<int:lesson_id>/comments/", api_views.lesson_comments, name="lesson_comments"),
    path("comments/<int:comment_id>/", api_views.comment_detail, name="comment_detail"),

    # ================= ASSIGNMENTS =================

    path("courses/<int:pk>/assignments/", api_views.assignment_list, name="assignment_list"),
    path(
        "assignments/<int:assignment_id>/submissions/",
        api_views.assignment_submissions,
        name="assignment_submissions",
    ),
    path(
        "submissions/<int:submission_id>/grade/",
        api_views.submission_grade,
        name="submission_grade",
    ),
]
