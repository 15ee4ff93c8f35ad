from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "sku", "price", "stock", "min_stock", "category", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name", "sku")
    # Stock moves only through inventory adjustments and orders
    readonly_fields = ("stock", "created_at", "updated_at")
