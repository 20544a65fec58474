class SlugShortenerError(Exception):
    """Base exception for all application-specific errors.

    Every subclass maps onto one HTTP status code. The message passed to the
    constructor is shown to clients, so it must never carry internal details.
    """

    error_code = 'app:slugshortener_error'
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SlugShortenerError):
    """Raised when a request carries malformed or missing fields."""

    error_code = 'request:validation_error'
    status_code = 400
    default_message = 'Invalid request'


class DangerousContentError(SlugShortenerError):
    """Raised when a destination URL uses a blocked protocol or host."""

    error_code = 'request:dangerous_content_error'
    status_code = 400
    default_message = 'URL contains dangerous content'


class AuthenticationError(SlugShortenerError):
    """Raised when a request carries no valid credential."""

    error_code = 'auth:authentication_error'
    status_code = 401
    default_message = 'Unauthorized - please login'


class NotFoundError(SlugShortenerError):
    """Raised when a slug has no record."""

    error_code = 'request:not_found_error'
    status_code = 404
    default_message = 'URL not found'


class ConflictError(SlugShortenerError):
    """Raised when a custom slug is already taken."""

    error_code = 'request:conflict_error'
    status_code = 409
    default_message = 'Slug already exists'


class RateLimitError(SlugShortenerError):
    """Raised when a client exceeds its request budget."""

    error_code = 'request:rate_limit_error'
    status_code = 429
    default_message = 'Rate limit exceeded'

    def __init__(self, message: str | None = None, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class ConfigurationError(SlugShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
