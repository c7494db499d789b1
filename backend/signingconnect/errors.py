class SigningConnectError(Exception):
    """Base for errors that map onto a client-facing HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(SigningConnectError):
    status_code = 400
    default_message = "All required fields must be provided"


class Conflict(SigningConnectError):
    # Duplicate emails answer 400, matching the rest of the validation family.
    status_code = 400
    default_message = "Resource already exists"


class AuthenticationFailed(SigningConnectError):
    status_code = 401
    default_message = "Invalid email or password"


class Forbidden(SigningConnectError):
    status_code = 403
    default_message = "Access denied"


class NotFound(SigningConnectError):
    status_code = 404
    default_message = "Not found"


class InvalidTransition(SigningConnectError):
    status_code = 409
    default_message = "Status change not allowed"
