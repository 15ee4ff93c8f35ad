"""Keep the role cache in step with user edits."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import User
from .permissions import invalidate_role_cache


@receiver(post_save, sender=User)
@receiver(post_delete, sender=User)
def drop_cached_role(sender, instance, **kwargs):
    invalidate_role_cache(instance.pk)
