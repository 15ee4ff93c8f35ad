"""Catalog endpoints: categories and products.

Reads need `catalog.view`; writes need `catalog.manage`.
"""

from django_filters import rest_framework as filters
from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from users.permissions import CATALOG_MANAGE, CATALOG_VIEW, HasCapability

from . import selectors
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer


class CatalogBaseViewSet(viewsets.ModelViewSet):
    permission_classes = [HasCapability]
    required_capabilities = {"GET": CATALOG_VIEW, "*": CATALOG_MANAGE}
    throttle_scope = "catalog"

    def get_throttles(self):
        if self.request.method not in ("GET", "HEAD", "OPTIONS"):
            self.throttle_scope = "catalog_write"
        return super().get_throttles()


@extend_schema_view(
    list=extend_schema(tags=["Catalog Endpoints"], summary="List categories"),
    retrieve=extend_schema(tags=["Catalog Endpoints"], summary="Get category"),
    create=extend_schema(tags=["Catalog Endpoints"], summary="Create category"),
    update=extend_schema(tags=["Catalog Endpoints"], summary="Update category"),
    partial_update=extend_schema(tags=["Catalog Endpoints"], summary="Partial update category"),
    destroy=extend_schema(tags=["Catalog Endpoints"], summary="Delete category"),
)
class CategoryViewSet(CatalogBaseViewSet):
    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    filter_backends = [filters.DjangoFilterBackend, drf_filters.SearchFilter]
    filterset_fields = ["is_active"]
    search_fields = ["name"]


class ProductFilterSet(filters.FilterSet):
    category = filters.NumberFilter(field_name="category_id")
    is_active = filters.BooleanFilter(field_name="is_active")
    low_stock = filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = Product
        fields = ["category", "is_active", "low_stock"]

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        return selectors.filter_low_stock(queryset, low=value)


@extend_schema_view(
    list=extend_schema(
        tags=["Catalog Endpoints"],
        summary="List products",
        description="Filters: `category`, `is_active`, `low_stock`. Search: `search` over name and SKU.",
        examples=[
            OpenApiExample(
                "Product list",
                value={
                    "count": 1,
                    "next": None,
                    "previous": None,
                    "results": [
                        {
                            "id": 7,
                            "name": "Casaca denim",
                            "sku": "CAS-DEN-01",
                            "price": "120.00",
                            "stock": 4,
                            "min_stock": 5,
                            "category": 2,
                            "category_name": "Casacas",
                            "is_active": True,
                            "state": "activo",
                            "is_low_stock": True,
                        }
                    ],
                },
                response_only=True,
            )
        ],
    ),
    retrieve=extend_schema(tags=["Catalog Endpoints"], summary="Get product"),
    create=extend_schema(
        tags=["Catalog Endpoints"],
        summary="Create product",
        description="`stock` is the opening balance and is recorded in the stock ledger.",
    ),
    update=extend_schema(tags=["Catalog Endpoints"], summary="Update product"),
    partial_update=extend_schema(tags=["Catalog Endpoints"], summary="Partial update product"),
    destroy=extend_schema(
        tags=["Catalog Endpoints"],
        summary="Delete product",
        description="Order history keeps the product name and SKU snapshots.",
    ),
)
class ProductViewSet(CatalogBaseViewSet):
    serializer_class = ProductSerializer
    filterset_class = ProductFilterSet
    filter_backends = [filters.DjangoFilterBackend, drf_filters.OrderingFilter, drf_filters.SearchFilter]
    ordering_fields = ["name", "price", "stock", "created_at"]
    search_fields = ["name", "sku"]

    def get_queryset(self):
        return selectors.products_queryset()
