from django.contrib import admin

from .models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("id", "business_name", "tax_id", "email", "phone", "is_active")
    list_filter = ("is_active",)
    search_fields = ("business_name", "tax_id", "email")
