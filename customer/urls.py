"""URL routes for the customer app."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import ClientViewSet

router = SimpleRouter()
router.register(r"clients", ClientViewSet, basename="client")

urlpatterns = [path("", include(router.urls))]
