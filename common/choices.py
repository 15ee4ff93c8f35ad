"""Shared enumerations and choices used across apps."""

from django.db import models


class ProductState(models.TextChoices):
    """Displayed lifecycle of a product; derived, never authoritative."""

    ACTIVE = "activo", "Active"
    INACTIVE = "inactivo", "Inactive"
    OUT_OF_STOCK = "agotado", "Out of stock"


class MovementType(models.TextChoices):
    INBOUND = "in", "Inbound"
    OUTBOUND = "out", "Outbound"
    ADJUST = "adjust", "Adjust"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders."""

    PENDING = "PENDIENTE", "Pending"
    CONFIRMED = "CONFIRMADO", "Confirmed"
    IN_PRODUCTION = "EN_PRODUCCION", "In production"
    COMPLETED = "COMPLETADO", "Completed"
    CANCELLED = "CANCELADO", "Cancelled"
    DELIVERED = "ENTREGADO", "Delivered"


class Role(models.TextChoices):
    """Staff roles of the back-office."""

    ADMIN = "administrador", "Administrator"
    RECEPTIONIST = "recepcionista", "Receptionist"
    DESIGNER = "diseñador", "Designer"
    CUTTER = "cortador", "Cutter"
    ASSISTANT = "ayudante", "Assistant"
    WORKSHOP_REP = "representante_taller", "Workshop representative"


class UserStatus(models.TextChoices):
    ACTIVE = "activo", "Active"
    INACTIVE = "inactivo", "Inactive"
    SUSPENDED = "suspendido", "Suspended"


class MaterialUnit(models.TextChoices):
    METER = "m", "Meter"
    CENTIMETER = "cm", "Centimeter"
    KILOGRAM = "kg", "Kilogram"
    GRAM = "g", "Gram"
    UNIT = "unidad", "Unit"
    ROLL = "rollo", "Roll"
