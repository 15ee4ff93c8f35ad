"""Scoped throttle that reads rates from Django settings at request time.

DRF caches `DEFAULT_THROTTLE_RATES` on import, so tests using
override_settings would otherwise keep the stale rates.
"""

from django.conf import settings
from rest_framework.throttling import ScopedRateThrottle


class SettingsScopedRateThrottle(ScopedRateThrottle):
    def get_rate(self):
        rf = getattr(settings, "REST_FRAMEWORK", {})
        rates = rf.get("DEFAULT_THROTTLE_RATES", {})
        return rates.get(self.scope)
