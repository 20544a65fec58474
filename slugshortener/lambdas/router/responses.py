"""API Gateway proxy response builders"""

import json
from typing import Any

from slugshortener.exceptions import SlugShortenerError, RateLimitError
from slugshortener.types import LambdaResponse


JSON_CONTENT_TYPE = 'application/json'
HTML_CONTENT_TYPE = 'text/html; charset=utf-8'
TEXT_CONTENT_TYPE = 'text/plain; charset=utf-8'


def response(status: int, body: str = '', content_type: str | None = None, headers: dict[str, str] | None = None) -> LambdaResponse:
    all_headers = {'Content-Type': content_type} if content_type else {}
    all_headers.update(headers or {})
    return {
        'statusCode': status,
        'headers': all_headers,
        'body': body,
    }


def response_json(status: int, payload: Any, headers: dict[str, str] | None = None, indent: int | None = None) -> LambdaResponse:
    return response(status, json.dumps(payload, indent=indent), JSON_CONTENT_TYPE, headers)


def response_html(status: int, html: str, headers: dict[str, str] | None = None) -> LambdaResponse:
    return response(status, html, HTML_CONTENT_TYPE, headers)


def response_text(status: int, text: str, headers: dict[str, str] | None = None) -> LambdaResponse:
    return response(status, text, TEXT_CONTENT_TYPE, headers)


def response_redirect(status: int, location: str, headers: dict[str, str] | None = None) -> LambdaResponse:
    return response(status, headers={'Location': location, **(headers or {})})


def response_error(error: SlugShortenerError, headers: dict[str, str] | None = None) -> LambdaResponse:
    """JSON error response `{"error": <message>}` for an application exception

    Server-side (5xx) errors never expose their message.
    """
    message = error.message if error.status_code < 500 else SlugShortenerError.default_message
    all_headers = dict(headers or {})
    if isinstance(error, RateLimitError):
        all_headers['Retry-After'] = str(error.retry_after)
    return response_json(error.status_code, {'error': message}, all_headers)
