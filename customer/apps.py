from django.apps import AppConfig


class CustomerConfig(AppConfig):
    """Client directory app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "customer"
    verbose_name = "Clients"
