from django.contrib import admin

from .models import IdempotencyKey, Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "product_sku", "quantity", "unit_price", "subtotal")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Status changes must go through the API so stock stays consistent."""

    list_display = ("id", "number", "status", "client", "total", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("number", "client__business_name", "client__tax_id")
    date_hierarchy = "created_at"
    readonly_fields = ("number", "status", "subtotal", "tax", "total", "created_by", "created_at", "updated_at")
    inlines = [OrderItemInline]


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "key", "scope", "path", "method", "response_code", "created_at")
    list_filter = ("method", "response_code", "created_at")
    search_fields = ("key", "scope", "path")
    date_hierarchy = "created_at"
