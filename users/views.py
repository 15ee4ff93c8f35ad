"""Users app API views.

Endpoints:
- signin: obtain a JWT pair with email or username.
- refresh: rotate the access token.
- me: the current user's profile, role and capabilities.
- staff: administrator-only CRUD over back-office accounts.
"""

from django_filters import rest_framework as filters
from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .logging import log_auth_event
from .models import User
from .permissions import USERS_MANAGE, HasCapability
from .serializers import EmailOrUsernameTokenObtainPairSerializer, StaffUserSerializer, UserMeSerializer


@extend_schema(
    operation_id="users_current_user",
    summary="Get current user profile",
    description=(
        "Returns the authenticated user's profile, role and resolved capabilities.\n\n"
        "Errors: 401 if authentication credentials are missing or invalid."
    ),
    tags=["User Endpoints"],
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    serializer = UserMeSerializer(request.user)
    return Response(serializer.data)


current_user.throttle_scope = "profile"


class SignInView(TokenObtainPairView):
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmailOrUsernameTokenObtainPairSerializer

    @extend_schema(tags=["User Endpoints"], summary="Sign in")
    def post(self, request, *args, **kwargs):
        try:
            resp = super().post(request, *args, **kwargs)
        except APIException:
            log_auth_event("signin", request, status="failed")
            raise
        log_auth_event("signin", request, status="success")
        return resp


class RefreshView(TokenRefreshView):
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["User Endpoints"], summary="Refresh access token")
    def post(self, request, *args, **kwargs):
        try:
            resp = super().post(request, *args, **kwargs)
        except APIException:
            log_auth_event("token_refresh", request, status="failed")
            raise
        log_auth_event("token_refresh", request, status="success")
        return resp


@extend_schema_view(
    list=extend_schema(
        tags=["Staff Endpoints"],
        summary="List staff users",
        description="Ordered by name. Filter by `role` or `status`; search by name, username or email.",
    ),
    retrieve=extend_schema(tags=["Staff Endpoints"], summary="Get staff user"),
    create=extend_schema(tags=["Staff Endpoints"], summary="Create staff user"),
    update=extend_schema(tags=["Staff Endpoints"], summary="Update staff user"),
    partial_update=extend_schema(
        tags=["Staff Endpoints"],
        summary="Partial update staff user",
        description="Role and status changes apply to the user's next request.",
    ),
    destroy=extend_schema(
        tags=["Staff Endpoints"],
        summary="Delete staff user",
        description="Orders the user created are kept without an author.",
    ),
)
class StaffUserViewSet(viewsets.ModelViewSet):
    permission_classes = [HasCapability]
    required_capability = USERS_MANAGE
    throttle_scope = "staff"
    serializer_class = StaffUserSerializer
    filter_backends = [filters.DjangoFilterBackend, drf_filters.SearchFilter]
    filterset_fields = ["role", "status"]
    search_fields = ["first_name", "last_name", "username", "email"]

    def get_queryset(self):
        return User.objects.order_by("first_name", "last_name", "username")

    def perform_create(self, serializer):
        user = serializer.save()
        log_auth_event("staff_create", self.request, user=self.request.user, extra={"target_id": user.id})

    def perform_update(self, serializer):
        user = serializer.save()
        log_auth_event(
            "staff_update",
            self.request,
            user=self.request.user,
            extra={"target_id": user.id, "fields": sorted(serializer.validated_data)},
        )

    def perform_destroy(self, instance):
        target_id = instance.id
        instance.delete()
        log_auth_event("staff_delete", self.request, user=self.request.user, extra={"target_id": target_id})
