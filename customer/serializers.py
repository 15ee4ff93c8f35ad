"""Serializers for the customer domain."""

from drf_spectacular.utils import OpenApiExample, extend_schema_serializer
from rest_framework import serializers

from .models import Client


@extend_schema_serializer(
    examples=[
        OpenApiExample(
            "Client",
            value={
                "id": 3,
                "tax_id": "20123456789",
                "business_name": "Textiles Andinos SAC",
                "email": "compras@textilesandinos.pe",
                "phone": "+51987654321",
                "address": "Av. Gamarra 123, Lima",
                "is_active": True,
            },
            response_only=True,
        )
    ]
)
class ClientSerializer(serializers.ModelSerializer):
    order_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Client
        fields = [
            "id",
            "tax_id",
            "business_name",
            "email",
            "phone",
            "address",
            "is_active",
            "order_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "order_count", "created_at", "updated_at"]
