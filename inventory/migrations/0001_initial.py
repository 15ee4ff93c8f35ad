from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("in", "Inbound"), ("out", "Outbound"), ("adjust", "Adjust")], max_length=16
                    ),
                ),
                ("quantity", models.IntegerField()),
                ("balance_after", models.IntegerField()),
                ("reason", models.CharField(blank=True, max_length=200)),
                ("reference", models.CharField(blank=True, db_index=True, max_length=120)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="movements",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["product", "created_at"], name="movement_product_created_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity", 0), _negated=True), name="movement_non_zero"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(balance_after__gte=0), name="movement_balance_non_negative"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Material",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("kind", models.CharField(blank=True, max_length=80)),
                (
                    "unit",
                    models.CharField(
                        choices=[
                            ("m", "Meter"),
                            ("cm", "Centimeter"),
                            ("kg", "Kilogram"),
                            ("g", "Gram"),
                            ("unidad", "Unit"),
                            ("rollo", "Roll"),
                        ],
                        default="unidad",
                        max_length=16,
                    ),
                ),
                ("current_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                ("min_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                ("quantity_used", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="materials",
                        to="catalog.category",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="materials",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_stock__gte=0), name="material_stock_non_negative"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(min_stock__gte=0), name="material_min_stock_non_negative"
                    ),
                ],
            },
        ),
    ]
