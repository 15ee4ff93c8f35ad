"""Customer domain models.

`Client` is the business customer an order can be billed to. Orders without
a client are direct sales.
"""

from django.core.validators import RegexValidator
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Client(TimeStampedModel):
    """Customer directory entry.

    `tax_id` holds the RUC (11 digits) or DNI (8 digits) and is unique.
    """

    tax_id = models.CharField(
        max_length=11,
        unique=True,
        validators=[RegexValidator(r"^(\d{8}|\d{11})$", message="Use an 8-digit DNI or 11-digit RUC")],
    )
    business_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[0-9]{6,15}$", message="Use digits only, optionally prefixed by +")],
    )
    address = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["business_name"]
        indexes = [
            models.Index(fields=["business_name"], name="client_business_name_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if self.business_name:
            self.business_name = self.business_name.strip()
        super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.business_name} ({self.tax_id})"
