"""Inventory endpoints: stock adjustments, ledger, low stock and materials."""

from catalog.serializers import ProductSerializer
from common import errors
from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import generics, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import INVENTORY_ADJUST, INVENTORY_MANAGE, INVENTORY_VIEW, HasCapability

from . import selectors
from .models import Material, StockMovement
from .serializers import MaterialSerializer, StockAdjustmentSerializer, StockMovementSerializer
from .services import adjust_stock


class StockAdjustView(APIView):
    """Apply a manual, signed stock correction to a product."""

    permission_classes = [HasCapability]
    required_capability = INVENTORY_ADJUST
    throttle_scope = "inventory_write"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust product stock",
        description=(
            "Adds `delta` to the product's stock through the atomic stock primitive. "
            "Negative deltas fail with 409 when stock is insufficient."
        ),
        request=StockAdjustmentSerializer,
        examples=[
            OpenApiExample("Restock", value={"delta": 12, "reason": "Workshop delivery"}, request_only=True),
            OpenApiExample("Adjusted", value={"product_id": 7, "stock": 16}, response_only=True),
        ],
    )
    def post(self, request, product_id: int):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            balance = adjust_stock(
                product_id=product_id,
                delta=serializer.validated_data["delta"],
                reason=serializer.validated_data["reason"],
                reference=f"manual:user:{request.user.id}",
                movement_type=StockMovement.TYPE_ADJUST,
            )
        except errors.ServiceError as exc:
            return Response(exc.as_payload(), status=exc.status_code)
        return Response({"product_id": product_id, "stock": balance}, status=status.HTTP_200_OK)


class MovementListView(generics.ListAPIView):
    permission_classes = [HasCapability]
    required_capability = INVENTORY_VIEW
    serializer_class = StockMovementSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock movements",
        description="Ledger of stock changes. Filters: product, movement_type, reference, created_after (ISO).",
        parameters=[
            OpenApiParameter(name="product", required=False, type=int),
            OpenApiParameter(name="movement_type", required=False, type=str),
            OpenApiParameter(name="reference", required=False, type=str),
            OpenApiParameter(name="created_after", required=False, type=str),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        qs = StockMovement.objects.select_related("product").order_by("-created_at", "-id")
        product = self.request.query_params.get("product")
        movement_type = self.request.query_params.get("movement_type")
        reference = self.request.query_params.get("reference")
        created_after = self.request.query_params.get("created_after")

        if product:
            qs = qs.filter(product_id=product)
        if movement_type:
            qs = qs.filter(movement_type=movement_type)
        if reference:
            qs = qs.filter(reference=reference)
        if created_after:
            dt = parse_datetime(created_after)
            if dt:
                qs = qs.filter(created_at__gte=dt)
        return qs


class LowStockListView(generics.ListAPIView):
    permission_classes = [HasCapability]
    required_capability = INVENTORY_VIEW
    serializer_class = ProductSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Products at or below minimum stock",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return selectors.low_stock_products()


@extend_schema_view(
    list=extend_schema(tags=["Inventory Endpoints"], summary="List materials"),
    retrieve=extend_schema(tags=["Inventory Endpoints"], summary="Get material"),
    create=extend_schema(tags=["Inventory Endpoints"], summary="Register material"),
    update=extend_schema(tags=["Inventory Endpoints"], summary="Update material"),
    partial_update=extend_schema(tags=["Inventory Endpoints"], summary="Partial update material"),
    destroy=extend_schema(tags=["Inventory Endpoints"], summary="Delete material"),
)
class MaterialViewSet(viewsets.ModelViewSet):
    permission_classes = [HasCapability]
    required_capabilities = {"GET": INVENTORY_VIEW, "*": INVENTORY_MANAGE}
    throttle_scope = "inventory_write"
    serializer_class = MaterialSerializer
    filter_backends = [drf_filters.SearchFilter, drf_filters.OrderingFilter]
    search_fields = ["name", "kind"]
    ordering_fields = ["name", "current_stock", "updated_at"]

    def get_queryset(self):
        qs = Material.objects.select_related("category", "product").order_by("-updated_at", "id")
        if self.request.query_params.get("low_stock") in ("1", "true", "True"):
            return selectors.low_stock_materials()
        return qs
