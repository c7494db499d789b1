from slowapi import Limiter
from slowapi.util import get_remote_address

from signingconnect.config import settings

# In-memory fixed windows keyed by client address.
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

# One counter shared by every auth endpoint.
auth_limit = limiter.shared_limit(
    lambda: settings.auth_rate_limit,
    scope="auth",
    error_message="Too many authentication attempts, please try again later.",
)
application_limit = limiter.limit(
    lambda: settings.application_rate_limit,
    error_message="Too many application submissions, please try again later.",
)
