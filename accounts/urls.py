from django.urls import path

from accounts.views.admin_users import (
    progress_report,
    stats,
    user_bulk_import,
    user_list,
    user_organization,
    user_role,
)
from accounts.views.auth import login_view, logout_view, me_view, register_view
from accounts.views.instructor_requests import apply_to_teach, request_list, request_review

app_name = "accounts"

urlpatterns = [
    # -------- Session --------
    path("auth/register/", register_view, name="register"),
    path("auth/login/", login_view, name="login"),
    path("auth/logout/", logout_view, name="logout"),
    path("auth/me/", me_view, name="me"),

    # -------- Instructor requests --------
    path("instructor-requests/", apply_to_teach, name="apply-to-teach"),
    path("admin/instructor-requests/", request_list, name="instructor-requests"),
    path(
        "admin/instructor-requests/<int:pk>/review/",
        request_review,
        name="instructor-request-review",
    ),

    # -------- User administration --------
    path("users/", user_list, name="users"),
    path("users/bulk/", user_bulk_import, name="users-bulk"),
    path("users/<int:pk>/role/", user_role, name="user-role"),
    path("users/<int:pk>/organization/", user_organization, name="user-organization"),

    # -------- Reports --------
    path("admin/stats/", stats, name="stats"),
    path("admin/progress/", progress_report, name="progress-report"),
]
