"""
JobTracker - Centralized rate limiting configuration.

All rate limit decorators should import `limiter` from this module and pass
`exempt_when=rate_limits_disabled`. The limiter keys on client IP address;
whether limits apply is read from the settings of the app serving the
request (JOBTRACKER_RATE_LIMIT_ENABLED), so apps in one process do not
share the switch.
"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)


def rate_limits_disabled(request: Request) -> bool:
    return not request.app.state.settings.rate_limit_enabled


# --- Rate limit constants ---

# Auth endpoints (login, register): strict to prevent brute force
RATE_LIMIT_AUTH = "5/minute"

# Job record writes (create, update, delete): moderate
RATE_LIMIT_GENERAL = "30/minute"

# LinkedIn import: bounded by LinkedIn's own API quota
RATE_LIMIT_LINKEDIN = "100/15minutes"
