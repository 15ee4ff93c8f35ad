"""Client directory endpoints.

Reads need `clients.view`; writes need `clients.manage`.
"""

from django.db.models import Count
from django_filters import rest_framework as filters
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from users.permissions import CLIENTS_MANAGE, CLIENTS_VIEW, HasCapability

from .models import Client
from .serializers import ClientSerializer


@extend_schema_view(
    list=extend_schema(
        tags=["Customer Endpoints"],
        summary="List clients",
        description="Ordered by business name. Search by `business_name` or `tax_id`; filter by `is_active`.",
    ),
    retrieve=extend_schema(tags=["Customer Endpoints"], summary="Get client"),
    create=extend_schema(tags=["Customer Endpoints"], summary="Create client"),
    update=extend_schema(tags=["Customer Endpoints"], summary="Update client"),
    partial_update=extend_schema(tags=["Customer Endpoints"], summary="Partial update client"),
    destroy=extend_schema(
        tags=["Customer Endpoints"],
        summary="Delete client",
        description="Existing orders of the client become direct sales.",
    ),
)
class ClientViewSet(viewsets.ModelViewSet):
    permission_classes = [HasCapability]
    required_capabilities = {"GET": CLIENTS_VIEW, "*": CLIENTS_MANAGE}
    throttle_scope = "clients"
    serializer_class = ClientSerializer
    filter_backends = [filters.DjangoFilterBackend, drf_filters.SearchFilter, drf_filters.OrderingFilter]
    filterset_fields = ["is_active"]
    search_fields = ["business_name", "tax_id"]
    ordering_fields = ["business_name", "created_at"]

    def get_queryset(self):
        return Client.objects.annotate(order_count=Count("orders")).order_by("business_name")
