"""
Request helpers shared by authentication, throttling and logging.

Kept free of DRF view imports: the authentication backend imports this
while DRF is still loading its settings.
"""


def get_client_ip(request):
    """Client address, preferring the first X-Forwarded-For hop."""
    if not request:
        return 'unknown'

    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')
