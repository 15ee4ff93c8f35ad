"""Authentication routes grouped under /api/v1/auth/."""

from django.urls import path

from .views import RefreshView, SignInView, current_user

urlpatterns = [
    path("signin/", SignInView.as_view(), name="signin"),
    path("refresh/", RefreshView.as_view(), name="token_refresh"),
    path("me/", current_user, name="me"),
]
