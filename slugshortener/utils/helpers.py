"""Helper utilities for AWS lambda functions.

Functions:
    get_short_url() -> str
        Get string representation of short URL for a given slug
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected exceptions into a generic 500 response

Example:
    >>> from slugshortener.utils.helpers import get_short_url
    >>> get_short_url('brave-otter', 'sho.rt')
    'https://sho.rt/brave-otter'
"""

import os
import json
import logging
import functools
from collections.abc import Callable

from slugshortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from slugshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from slugshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def get_short_url(slug: str, domain: str) -> str:
    """Get string representation of shortened URL

    Args:
        slug (str): slug of the URL record
        domain (str): configured public domain, with or without scheme

    Returns:
        str: short url string representation
    """
    domain = domain.rstrip('/')
    if not domain.startswith(('http://', 'https://')):
        domain = f'https://{domain}'
    return f'{domain}/{slug}'


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        KeyError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY')
        ... def my_function():
        ...     pass
        >>> my_function()
        KeyError: Missing required environment variables: 'AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise KeyError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable[[LambdaEvent, LambdaContext], LambdaResponse]) -> Callable:
    """Decorator: respond with a generic 500 when the handler raises unexpectedly

    No exception detail reaches the client. Under SAM local the exception is
    re-raised instead, so it shows up in the developer's console.
    """

    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception('Unhandled exception in lambda handler. Responding with 500.', extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR})
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps({'error': 'Internal server error', 'error_code': UNKNOWN_INTERNAL_SERVER_ERROR}),
            }

    return wrapper
