"""User model for back-office staff.

Extends Django's `AbstractUser` with a unique email, a staff role that
drives capability checks, and an account status. See `users.permissions`
for the role to capability mapping.
"""

from common.choices import Role, UserStatus
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Back-office user with role and account status.

    Fields:
    - email: unique, normalized to lowercase on save.
    - role: one of `common.choices.Role`; governs what the user may do.
    - status: only `activo` users hold capabilities.
    """

    ROLE_CHOICES = Role.choices
    STATUS_ACTIVE = UserStatus.ACTIVE
    STATUS_CHOICES = UserStatus.choices

    email = models.EmailField(unique=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +51987654321)")],
    )
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=Role.ASSISTANT, db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)

    @property
    def full_name(self) -> str:
        return self.get_full_name() or self.username
