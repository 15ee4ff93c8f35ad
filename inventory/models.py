"""Inventory models.

`StockMovement` is the append-only ledger of every product stock change.
`Material` tracks raw materials (fabric, thread, buttons) used in production.
"""

from decimal import Decimal

from common.choices import MaterialUnit, MovementType
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StockMovement(TimeStampedModel):
    TYPE_INBOUND = MovementType.INBOUND
    TYPE_OUTBOUND = MovementType.OUTBOUND
    TYPE_ADJUST = MovementType.ADJUST
    TYPE_CHOICES = MovementType.choices

    product = models.ForeignKey("catalog.Product", on_delete=models.CASCADE, related_name="movements")
    movement_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    quantity = models.IntegerField()  # signed: +inbound, -outbound
    balance_after = models.IntegerField()
    reason = models.CharField(max_length=200, blank=True)
    reference = models.CharField(max_length=120, blank=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="movement_non_zero", condition=~models.Q(quantity=0)),
            models.CheckConstraint(name="movement_balance_non_negative", condition=models.Q(balance_after__gte=0)),
        ]
        indexes = [
            models.Index(fields=["product", "created_at"], name="movement_product_created_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.movement_type} {self.quantity} for product {self.product_id}"


class Material(TimeStampedModel):
    """Raw material ("insumo") kept in the workshop."""

    UNIT_CHOICES = MaterialUnit.choices

    name = models.CharField(max_length=200)
    kind = models.CharField(max_length=80, blank=True)
    unit = models.CharField(max_length=16, choices=UNIT_CHOICES, default=MaterialUnit.UNIT)
    current_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    min_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    quantity_used = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0"))
    category = models.ForeignKey(
        "catalog.Category", null=True, blank=True, on_delete=models.SET_NULL, related_name="materials"
    )
    product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, on_delete=models.SET_NULL, related_name="materials"
    )

    class Meta:
        ordering = ["-updated_at", "id"]
        constraints = [
            models.CheckConstraint(name="material_stock_non_negative", condition=models.Q(current_stock__gte=0)),
            models.CheckConstraint(name="material_min_stock_non_negative", condition=models.Q(min_stock__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.current_stock} {self.unit})"

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock
