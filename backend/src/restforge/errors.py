"""Exception types for RestForge.

Boot-time problems raise ConfigurationError and abort app creation.
Per-request problems raise ValidationError / NotFoundError, which the
API layer maps to envelopes. Anything else bubbles to the outermost
error-handling middleware.
"""


class RestForgeError(Exception):
    """Base class for all RestForge errors."""

    status_code: int = 500


class ConfigurationError(RestForgeError):
    """Discovery or wiring failed; the API must not start."""


class ValidationError(RestForgeError):
    """The request is malformed (bad identifier, bad body, bad query)."""

    status_code = 400

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid request")


class NotFoundError(RestForgeError):
    """The addressed record or resource does not exist."""

    status_code = 404


class GatewayError(RestForgeError):
    """The model gateway failed unexpectedly."""


class ScaffoldingError(RestForgeError):
    """A directory or file could not be written while forging an action."""

    def __init__(self, message: str, path: str):
        self.path = path
        super().__init__(f"{message}: {path}")
