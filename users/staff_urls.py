"""Staff administration routes grouped under /api/v1/users/."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import StaffUserViewSet

router = SimpleRouter()
router.register(r"staff", StaffUserViewSet, basename="staff-user")

urlpatterns = [path("", include(router.urls))]
