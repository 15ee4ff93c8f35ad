"""Serializers for inventory domain.

Read-only ledger entries, materials, and the manual stock adjustment input.
"""

from rest_framework import serializers

from .models import Material, StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    """Read-only representation of a ledger entry."""

    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "sku",
            "movement_type",
            "quantity",
            "balance_after",
            "reason",
            "reference",
            "created_at",
        ]
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    """Manual correction of a product's stock (signed delta)."""

    delta = serializers.IntegerField()
    reason = serializers.CharField(max_length=200)

    def validate_delta(self, value: int) -> int:
        if value == 0:
            raise serializers.ValidationError("Delta must be non-zero.")
        return value


class MaterialSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Material
        fields = [
            "id",
            "name",
            "kind",
            "unit",
            "current_stock",
            "min_stock",
            "quantity_used",
            "category",
            "product",
            "is_low_stock",
            "updated_at",
        ]
        read_only_fields = ["id", "is_low_stock", "updated_at"]
        extra_kwargs = {
            "current_stock": {"min_value": 0},
            "min_stock": {"min_value": 0},
            "quantity_used": {"min_value": 0},
        }
