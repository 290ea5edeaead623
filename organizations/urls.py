from django.urls import path

from organizations.views.membership import (
    join,
    my_organization,
    organization_list,
    organization_update,
)
from organizations.views.public import org_public_page

app_name = "organizations"

urlpatterns = [
    # -------- Member --------
    path("organizations/mine/", my_organization, name="mine"),
    path("organizations/join/", join, name="join"),

    # -------- Administration --------
    path("organizations/", organization_list, name="list"),
    path("organizations/<int:pk>/", organization_update, name="update"),

    # -------- Public --------
    path("organizations/<slug:slug>/", org_public_page, name="public_page"),
]
