"""Serializers for catalog categories and products.

`stock` is accepted only when creating a product (as its opening balance);
afterwards it changes exclusively through inventory adjustments and orders.
"""

from django.db import transaction
from inventory.services import record_opening_stock
from rest_framework import serializers

from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class ProductSerializer(serializers.ModelSerializer):
    """Product representation with derived `state` and `is_low_stock`."""

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    stock = serializers.IntegerField(min_value=0, required=False, default=0)
    state = serializers.CharField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "sku",
            "description",
            "price",
            "stock",
            "min_stock",
            "category",
            "category_name",
            "image_url",
            "is_active",
            "state",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "price": {"min_value": 0},
            "min_stock": {"min_value": 0},
        }

    def validate(self, attrs):
        if self.instance is not None and "stock" in getattr(self, "initial_data", {}):
            raise serializers.ValidationError(
                {"stock": "Stock cannot be edited directly; use the inventory adjustment endpoint."}
            )
        return attrs

    def create(self, validated_data):
        opening = int(validated_data.pop("stock", 0) or 0)
        with transaction.atomic():
            product = Product.objects.create(stock=0, **validated_data)
            if opening:
                record_opening_stock(product_id=product.id, quantity=opening)
                product.refresh_from_db(fields=["stock"])
        return product

    def update(self, instance, validated_data):
        validated_data.pop("stock", None)
        return super().update(instance, validated_data)
