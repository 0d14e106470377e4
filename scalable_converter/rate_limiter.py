"""Rate limiter configuration for the external lookup endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter instance - shared across modules
limiter = Limiter(key_func=get_remote_address)

# OpenFIGI and the validators are slow, rate-limited third-party services
LOOKUP_RATE_LIMIT = "20/minute"
