"""DRF serializers for Orders.

Stored money columns are exposed as-is; they were fixed at placement.
Input serializers only shape the payload, business rules live in services.
"""

from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """API representation for an order with its line items."""

    items = OrderItemSerializer(many=True, read_only=True)
    client_name = serializers.CharField(source="client.business_name", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "status",
            "client",
            "client_name",
            "subtotal",
            "tax",
            "total",
            "payment_method",
            "notes",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class OrderLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class PlaceOrderSerializer(serializers.Serializer):
    """Payload for placing an order. Prices are never accepted from the caller."""

    client_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    items = OrderLineInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.CharField(max_length=40, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CancellationSerializer(serializers.Serializer):
    """Response body for a cancellation: the order plus what was restored or skipped."""

    detail = serializers.SerializerMethodField()
    order = OrderSerializer(read_only=True)
    restored = serializers.ListField(child=serializers.DictField(), read_only=True)
    skipped = serializers.ListField(child=serializers.DictField(), read_only=True)

    def get_detail(self, obj) -> str:
        number = obj.order.number or obj.order.id
        if obj.skipped:
            return f"Order {number} cancelled; {len(obj.skipped)} line(s) could not be restocked."
        return f"Order {number} cancelled."


class MonthlySalesSerializer(serializers.Serializer):
    month = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class StatsSummarySerializer(serializers.Serializer):
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_orders = serializers.IntegerField()
    pending = serializers.IntegerField()


class OrderStatsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    summary = StatsSummarySerializer()
    monthly_sales = MonthlySalesSerializer(many=True)
    status_counts = serializers.DictField(child=serializers.IntegerField())


class ReportMetricsSerializer(serializers.Serializer):
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    orders = serializers.IntegerField()
    new_clients = serializers.IntegerField()
    growth_percent = serializers.IntegerField()
    previous_total = serializers.DecimalField(max_digits=14, decimal_places=2)


class DailySalesSerializer(serializers.Serializer):
    date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class CategoryUnitsSerializer(serializers.Serializer):
    category = serializers.CharField()
    units = serializers.IntegerField()


class SalesReportSerializer(serializers.Serializer):
    """Sales over a rolling window of `days`, with growth against the window before it."""

    days = serializers.IntegerField()
    metrics = ReportMetricsSerializer()
    daily_sales = DailySalesSerializer(many=True)
    sales_by_category = CategoryUnitsSerializer(many=True)
