"""Normalized view of an API Gateway proxy event

Both REST API (payload v1) and HTTP API (payload v2) events are accepted.

Example:
    >>> request = Request.from_event({
    ...     'httpMethod': 'GET',
    ...     'path': '/brave-otter',
    ...     'headers': {'User-Agent': 'Twitterbot/1.0'},
    ...     'requestContext': {'identity': {'sourceIp': '203.0.113.7'}},
    ... })
    >>> request.header('user-agent'), request.client_id
    ('Twitterbot/1.0', '203.0.113.7')
"""

import json
import base64
import binascii
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from slugshortener.constants import UNKNOWN_CLIENT
from slugshortener.exceptions import ValidationError
from slugshortener.types import LambdaEvent


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)  # lower-cased names
    query: dict[str, str] = field(default_factory=dict)
    body: str = ''
    client_id: str = UNKNOWN_CLIENT
    is_secure: bool = True

    @classmethod
    def from_event(cls, event: LambdaEvent) -> 'Request':
        request_context = event.get('requestContext') or {}
        http_context = request_context.get('http') or {}

        method = event.get('httpMethod') or http_context.get('method') or 'GET'
        path = event.get('path') or event.get('rawPath') or '/'
        headers = {k.lower(): v for k, v in (event.get('headers') or {}).items() if v is not None}

        # HTTP API (v2) events carry cookies separately from headers
        if event.get('cookies') and 'cookie' not in headers:
            headers['cookie'] = '; '.join(event['cookies'])

        body = event.get('body') or ''
        if body and event.get('isBase64Encoded'):
            try:
                body = base64.b64decode(body).decode('utf-8')
            except (binascii.Error, UnicodeDecodeError) as e:
                raise ValidationError('Invalid request body') from e

        # Source IP is set by API Gateway itself; clients can't forge it
        client_id = (request_context.get('identity') or {}).get('sourceIp') or http_context.get('sourceIp') or UNKNOWN_CLIENT

        return cls(
            method=method.upper(),
            path=path,
            headers=headers,
            query=dict(event.get('queryStringParameters') or {}),
            body=body,
            client_id=client_id,
            is_secure=headers.get('x-forwarded-proto', 'https').lower() == 'https',
        )

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def cookies(self) -> dict[str, str]:
        cookies = {}
        for part in (self.header('cookie') or '').split(';'):
            name, sep, value = part.strip().partition('=')
            if sep and name:
                cookies.setdefault(name, value)
        return cookies

    def json(self) -> dict[str, Any]:
        """Parse the body as a JSON object.

        Raises:
            ValidationError: if the body isn't a JSON object.
        """
        try:
            data = json.loads(self.body or '{}')
        except json.JSONDecodeError as e:
            raise ValidationError('Invalid JSON body') from e
        if not isinstance(data, dict):
            raise ValidationError('Invalid JSON body')
        return data

    def form(self) -> dict[str, str]:
        """Parse an application/x-www-form-urlencoded body (first value per field)."""
        return {k: v[0] for k, v in parse_qs(self.body, keep_blank_values=True).items()}
