"""Orders API endpoints.

Placement and cancellation delegate to `orders.services`; service errors are
translated to `{"detail": ...}` responses here. Both mutations are idempotent
when an `Idempotency-Key` header is sent.
"""

from common import errors
from common.throttling import SettingsScopedRateThrottle
from django.http import Http404
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import ORDERS_CANCEL, ORDERS_CREATE, ORDERS_VIEW, REPORTS_VIEW, HasCapability

from . import selectors
from .models import Order
from .serializers import (
    CancellationSerializer,
    OrderSerializer,
    OrderStatsSerializer,
    PlaceOrderSerializer,
    SalesReportSerializer,
)
from .services import cancel_order, compute_request_hash, place_order, with_idempotency

IDEMPOTENCY_HEADER = OpenApiParameter(
    name="Idempotency-Key",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Makes the request idempotent within scope+path+method",
    type=str,
)


def _run_idempotent(request, handler, fingerprint=None):
    """Run `handler` once per `Idempotency-Key`; the fingerprint defaults to the request body."""
    idem_key = request.headers.get("Idempotency-Key")
    if idem_key:
        if fingerprint is None:
            fingerprint = getattr(request, "data", None)
        body, code = with_idempotency(
            key=idem_key,
            user=request.user,
            path=str(request.path),
            method=str(request.method),
            request_hash=compute_request_hash(fingerprint),
            handler=handler,
        )
        return Response(body, status=code)

    body, code = handler()
    return Response(body, status=code)


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class OrderListCreateView(generics.ListAPIView):
    """List orders with basic filters, or place a new order.

    Filters:
    - `status`: one of the OrderStatus values
    - `client`: client id
    - `number`: exact match of order number
    - `start`: ISO date/time string; filters `created_at >= start`
    - `end`: ISO date/time string; filters `created_at <= end`
    """

    permission_classes = [HasCapability]
    required_capabilities = {"GET": ORDERS_VIEW, "POST": ORDERS_CREATE}
    throttle_classes = [SettingsScopedRateThrottle]
    serializer_class = OrderSerializer
    pagination_class = DefaultPagination

    def get_throttles(self):
        self.throttle_scope = "orders_write" if self.request.method == "POST" else "orders"
        return super().get_throttles()

    def get_queryset(self):
        return selectors.orders_queryset(self.request.query_params)

    @extend_schema(
        tags=["Orders"],
        summary="List orders",
        description="List orders with optional filters and pagination.",
        parameters=[
            OpenApiParameter(name="status", description="Order status filter", required=False, type=str),
            OpenApiParameter(name="client", description="Client id", required=False, type=int),
            OpenApiParameter(name="number", description="Order number exact match", required=False, type=str),
            OpenApiParameter(name="start", description="Created at >= start (ISO)", required=False, type=str),
            OpenApiParameter(name="end", description="Created at <= end (ISO)", required=False, type=str),
            OpenApiParameter(name="page", description="Page number", required=False, type=int),
            OpenApiParameter(name="page_size", description="Items per page", required=False, type=int),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Orders"],
        summary="Place order",
        description=(
            "Creates a PENDIENTE order priced from the catalog and decrements stock per line. "
            "Fails with 409 and no changes when any line lacks stock."
        ),
        parameters=[IDEMPOTENCY_HEADER],
        request=PlaceOrderSerializer,
        responses={201: OrderSerializer},
        examples=[
            OpenApiExample(
                "Place",
                value={"client_id": 3, "items": [{"product_id": 7, "quantity": 2}], "payment_method": "efectivo"},
                request_only=True,
            ),
            OpenApiExample(
                "Insufficient stock",
                value={
                    "detail": "Insufficient stock for product 7: requested 5, available 3",
                    "product_id": 7,
                    "requested": 5,
                    "available": 3,
                },
                response_only=True,
                status_codes=["409"],
            ),
        ],
    )
    def post(self, request):
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        def _handler():
            try:
                order = place_order(
                    items=[dict(item) for item in data["items"]],
                    client_id=data.get("client_id"),
                    payment_method=data.get("payment_method"),
                    notes=data.get("notes", ""),
                    user=request.user,
                )
            except errors.ServiceError as exc:
                return exc.as_payload(), exc.status_code
            order = selectors.orders_queryset().get(pk=order.pk)
            return OrderSerializer(order, context={"request": request}).data, status.HTTP_201_CREATED

        return _run_idempotent(request, _handler)


class OrderDetailView(generics.RetrieveAPIView):
    permission_classes = [HasCapability]
    required_capability = ORDERS_VIEW
    throttle_classes = [SettingsScopedRateThrottle]
    throttle_scope = "orders"
    serializer_class = OrderSerializer

    def get_object(self):
        try:
            return selectors.orders_queryset().get(id=int(self.kwargs["order_id"]))
        except (Order.DoesNotExist, ValueError):
            raise Http404("Not found.")

    @extend_schema(tags=["Orders"], summary="Get order detail")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderCancelView(APIView):
    """Cancel an order and restore its stock.

    The order id comes from the path, or from `?id=` on the collection route.
    Idempotent when `Idempotency-Key` is provided.
    """

    permission_classes = [HasCapability]
    required_capability = ORDERS_CANCEL
    throttle_classes = [SettingsScopedRateThrottle]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Orders"],
        summary="Cancel order",
        description=(
            "Sets the order to CANCELADO and gives each line's quantity back to stock in one transaction. "
            "Returns 409 when the order is already cancelled."
        ),
        parameters=[
            IDEMPOTENCY_HEADER,
            OpenApiParameter(name="id", description="Order id (collection route only)", required=False, type=int),
        ],
        request=None,
        responses={200: CancellationSerializer},
        examples=[
            OpenApiExample(
                "Already cancelled",
                value={"detail": "Order PED-000001 is already cancelled."},
                response_only=True,
                status_codes=["409"],
            ),
        ],
    )
    def patch(self, request, order_id: int | None = None):
        if order_id is None:
            raw = request.query_params.get("id")
            if not raw:
                return Response({"detail": "Order id is required."}, status=status.HTTP_400_BAD_REQUEST)
            try:
                order_id = int(raw)
            except ValueError:
                return Response({"detail": "Order id must be an integer."}, status=status.HTTP_400_BAD_REQUEST)

        def _handler():
            try:
                result = cancel_order(order_id=order_id, user=request.user)
            except errors.ServiceError as exc:
                return exc.as_payload(), exc.status_code
            result.order = selectors.orders_queryset().get(pk=result.order.pk)
            return CancellationSerializer(result, context={"request": request}).data, status.HTTP_200_OK

        # The collection route carries the id in the query string, outside the key's path scope
        return _run_idempotent(request, _handler, fingerprint={"order_id": order_id})


class OrderStatsView(APIView):
    permission_classes = [HasCapability]
    required_capability = REPORTS_VIEW
    throttle_classes = [SettingsScopedRateThrottle]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Orders"],
        summary="Sales statistics",
        description="Totals, monthly sales for `year` (default current year) and counts per status.",
        parameters=[OpenApiParameter(name="year", required=False, type=int)],
        responses={200: OrderStatsSerializer},
    )
    def get(self, request):
        year = request.query_params.get("year")
        if year is not None and not year.isdigit():
            return Response({"detail": "Year must be an integer."}, status=status.HTTP_400_BAD_REQUEST)
        data = selectors.order_stats(year=int(year) if year else None)
        return Response(OrderStatsSerializer(data).data)


class SalesReportView(APIView):
    permission_classes = [HasCapability]
    required_capability = REPORTS_VIEW
    throttle_classes = [SettingsScopedRateThrottle]
    throttle_scope = "orders"

    max_days = 366

    @extend_schema(
        tags=["Orders"],
        summary="Sales report",
        description=(
            "Sales, orders and new clients over the last `days` days (default 30), "
            "growth against the previous window of the same length, sales per day and units per category. "
            "Cancelled orders are excluded."
        ),
        parameters=[OpenApiParameter(name="days", required=False, type=int)],
        responses={200: SalesReportSerializer},
    )
    def get(self, request):
        raw = request.query_params.get("days", "30")
        if not raw.isdigit() or not 1 <= int(raw) <= self.max_days:
            return Response(
                {"detail": f"Days must be an integer between 1 and {self.max_days}."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(SalesReportSerializer(selectors.sales_report(days=int(raw))).data)
