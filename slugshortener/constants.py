from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Session cookie lifetime (7 days in seconds)
    SESSION = 604_800  # 60 * 60 * 24 * 7
    # Public listing cache lifetime (5 minutes in seconds)
    ALL_URLS_CACHE = 300
    # Admin listing cache lifetime (1 minute in seconds)
    ADMIN_URLS_CACHE = 60
    # Crawler preview cache lifetime (1 hour in seconds)
    CRAWLER_PREVIEW_CACHE = 3_600


class RateLimit:
    """Fixed-window rate limit policies as (limit, window in milliseconds)."""

    REDIRECT = (60, 60_000)  # 60 requests per minute
    ADMIN = (50, 900_000)  # 50 requests per 15 minutes


class Slug:
    """Slug format and generation parameters."""

    MIN_LENGTH = 3
    MAX_LENGTH = 50
    RESERVED = frozenset({'admin', 'api', 'health', 'status', 'backup'})
    MAX_GENERATION_ATTEMPTS = 10
    RANDOM_SUFFIX_MAX = 999


class Timeout:
    """Outbound request timeouts in milliseconds."""

    METADATA_FETCH_MS = 5_000


# Fallback for requests which carry no client identity
UNKNOWN_CLIENT = 'unknown'

# Name of the session cookie issued to the owner
SESSION_COOKIE = 'session'

# User agent used when fetching destination pages
METADATA_USER_AGENT = 'Mozilla/5.0 (compatible; URLShortenerBot/1.0)'

# Default home page for requests to the root path
DEFAULT_HOME_URL = 'https://example.com'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        DOMAIN = 'DOMAIN'
        HOME_URL = 'HOME_URL'
        API_SECRET = 'API_SECRET'  # noqa: S105
        API_SECRET_NAME = 'API_SECRET_NAME'  # noqa: S105

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
