"""Catalog app models.

Categories and the finished garments sold by the business. `Product.stock`
is the on-hand counter; it is only ever mutated through
`inventory.services.adjust_stock`.
"""

from common.choices import ProductState
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Category(TimeStampedModel):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Product(TimeStampedModel):
    """A sellable garment with its on-hand stock counter."""

    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=64, unique=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    stock = models.IntegerField(default=0)
    min_stock = models.IntegerField(default=5)
    category = models.ForeignKey(
        Category,
        related_name="products",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    image_url = models.URLField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="product_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(name="product_min_stock_non_negative", condition=models.Q(min_stock__gte=0)),
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price__gte=0)),
        ]
        indexes = [
            models.Index(fields=["category", "is_active"], name="product_category_active_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} [{self.sku}]"

    @property
    def state(self) -> str:
        if not self.is_active:
            return ProductState.INACTIVE
        if self.stock <= 0:
            return ProductState.OUT_OF_STOCK
        return ProductState.ACTIVE

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock
