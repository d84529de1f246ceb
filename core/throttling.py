"""
Fixed-window rate limiting.

DRF's SimpleRateThrottle keeps a sliding history per client. Login and
public submissions instead count requests inside fixed windows keyed by
client IP, so the counter resets at the window boundary.
"""

import time

from rest_framework.throttling import SimpleRateThrottle

from core.utils import get_client_ip

_PERIODS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}


class FixedWindowRateThrottle(SimpleRateThrottle):
    """
    Count requests per client inside fixed windows.

    Rates look like ``10/m`` or ``100/15m`` (a multiplier before the
    period unit).
    """

    cache_format = 'throttle_%(scope)s_%(ident)s'

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        num, period = rate.split('/')
        period = period.strip()
        multiplier = period[:-1] or '1'
        unit = period[-1].lower()
        return (int(num), int(multiplier) * _PERIODS[unit])

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': get_client_ip(request),
        }

    def allow_request(self, request, view):
        if self.rate is None:
            return True

        key = self.get_cache_key(request, view)
        if key is None:
            return True

        self.now = self.timer()
        self.window_start = int(self.now // self.duration) * self.duration
        window_key = f"{key}:{self.window_start}"

        # add() is a no-op when the window counter already exists
        self.cache.add(window_key, 0, self.duration)
        try:
            count = self.cache.incr(window_key)
        except ValueError:
            # Counter expired between add() and incr()
            self.cache.set(window_key, 1, self.duration)
            count = 1

        return count <= self.num_requests

    def wait(self):
        return max(0, self.window_start + self.duration - self.now)

    def timer(self):
        return time.time()


class LoginThrottle(FixedWindowRateThrottle):
    scope = 'login'


class RegistrationSubmitThrottle(FixedWindowRateThrottle):
    scope = 'registration'
