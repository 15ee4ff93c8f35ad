"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import Material, StockMovement


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "movement_type", "quantity", "balance_after", "reference", "created_at")
    list_filter = ("movement_type",)
    search_fields = ("product__sku", "reference")

    # The ledger is append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "kind", "unit", "current_stock", "min_stock", "updated_at")
    list_filter = ("unit", "kind")
    search_fields = ("name",)
