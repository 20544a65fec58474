"""Admin JSON API: create, update, delete, list and back up URL records

Endpoints (all require owner authentication, checked by the caller):
    POST   /admin/urls          create a record
    PUT    /admin/urls/{slug}   change a record's destination
    DELETE /admin/urls/{slug}   remove a record
    GET    /admin/urls          list records with their short URLs
    GET    /admin/backup        download every record as a JSON document

`/api/...` is accepted as an alias of `/admin/...`.

Every request first consumes one hit of the client's admin rate limit. Handlers
raise SlugShortenerError subclasses; dispatch_api() turns them into JSON error
responses.
"""

import re
import time
import logging
from datetime import datetime, UTC

from slugshortener.constants import TTL
from slugshortener.dao.base import URLRecordBaseDAO, RateLimitBaseDAO
from slugshortener.dao.exceptions import URLRecordAlreadyExistsError, URLRecordNotFoundError
from slugshortener.exceptions import (
    SlugShortenerError,
    ValidationError,
    DangerousContentError,
    NotFoundError,
    ConflictError,
    RateLimitError,
)
from slugshortener.models import URLRecordModel
from slugshortener.types import LambdaResponse
from slugshortener.utils import get_short_url
from slugshortener.utils.config import AppSettings
from slugshortener.utils.metadata import fetch_page_metadata
from slugshortener.utils.slugs import is_valid_custom_slug, generate_unique_slug
from slugshortener.utils.urls import normalize_url, is_valid_url, is_dangerous_url
from slugshortener.lambdas.router.request import Request
from slugshortener.lambdas.router.responses import response_json, response_error
from slugshortener.lambdas.router.constants import (
    RATE_LIMITED,
    URL_CREATED,
    URL_UPDATED,
    URL_DELETED,
    REQUEST_REJECTED,
    ADMIN_PURPOSE,
)


logger = logging.getLogger(__name__)

URLS_PATH = '/admin/urls'
BACKUP_PATH = '/admin/backup'
URL_ITEM_RE = re.compile(r'^/admin/urls/(?P<slug>[^/]+)$')


def _api_path(path: str) -> str:
    """Map the `/api` alias onto the canonical `/admin` tree."""
    if path == '/api' or path.startswith('/api/'):
        return '/admin' + path[len('/api') :]
    return path


def _record_payload(record: URLRecordModel, settings: AppSettings) -> dict:
    return {**record.to_dict(), 'shortUrl': get_short_url(record.slug, settings.domain)}


def _require_url(body: dict) -> str:
    """Validate the `url` field of a request body and return it normalized

    Dangerous destinations are rejected before the format check, so that
    `javascript:` and friends always report as dangerous.

    Raises:
        ValidationError: if the field is missing or the URL is malformed.
        DangerousContentError: if the URL uses a blocked protocol or host.
    """
    raw_url = body.get('url')
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise ValidationError('URL is required')

    url = normalize_url(raw_url)
    if is_dangerous_url(url):
        raise DangerousContentError()
    if not is_valid_url(url):
        raise ValidationError('Invalid URL format')
    return url


def _choose_slug(body: dict, url_dao: URLRecordBaseDAO) -> str:
    raw_slug = body.get('slug')
    if raw_slug is None or raw_slug == '':
        return generate_unique_slug(url_dao)

    if not isinstance(raw_slug, str):
        raise ValidationError('Invalid slug format')
    slug = raw_slug.strip().lower()
    if not is_valid_custom_slug(slug):
        raise ValidationError('Invalid slug format')
    if url_dao.exists(slug):
        raise ConflictError()
    return slug


def create_url(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO) -> LambdaResponse:
    """Create a URL record

    HTTP responses:
        201: Record created
            success: true
            data: stored record
            shortUrl: public short URL
        400: Missing/invalid URL, dangerous URL, invalid slug or invalid JSON
        409: Custom slug already taken
    """
    body = request.json()
    url = _require_url(body)
    slug = _choose_slug(body, url_dao)

    metadata = fetch_page_metadata(url, settings.metadata_timeout_ms)
    record = URLRecordModel.new(url=url, slug=slug, metadata=metadata)

    try:
        url_dao.insert(record)
    except URLRecordAlreadyExistsError as e:
        # Another writer claimed the slug after our existence check
        raise ConflictError() from e

    logger.info('Created URL record.', extra={'slug': slug, 'url': url, 'event': URL_CREATED})
    return response_json(
        201,
        {
            'success': True,
            'data': record.to_dict(),
            'shortUrl': get_short_url(slug, settings.domain),
        },
    )


def update_url(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, slug: str) -> LambdaResponse:
    """Change the destination of an existing record

    Metadata is fetched again only when the destination actually changes.

    HTTP responses:
        200: Record updated
        400: Missing/invalid URL, dangerous URL or invalid JSON
        404: Slug has no record
    """
    body = request.json()
    slug = slug.lower()

    existing = url_dao.get(slug)
    if existing is None:
        raise NotFoundError()

    url = _require_url(body)
    metadata = existing.metadata if url == existing.url else fetch_page_metadata(url, settings.metadata_timeout_ms)

    try:
        record = url_dao.update(slug, url=url, metadata=metadata)
    except URLRecordNotFoundError as e:
        # Deleted between our read and the conditional write
        raise NotFoundError() from e

    logger.info('Updated URL record.', extra={'slug': slug, 'url': url, 'event': URL_UPDATED})
    return response_json(
        200,
        {
            'success': True,
            'data': record.to_dict(),
            'shortUrl': get_short_url(slug, settings.domain),
        },
    )


def delete_url(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, slug: str) -> LambdaResponse:
    slug = slug.lower()
    if not url_dao.exists(slug):
        raise NotFoundError()

    url_dao.delete(slug)
    logger.info('Deleted URL record.', extra={'slug': slug, 'event': URL_DELETED})
    return response_json(200, {'success': True, 'message': 'URL deleted successfully'})


def list_urls(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO) -> LambdaResponse:
    records = url_dao.list_all()
    return response_json(
        200,
        {
            'success': True,
            'count': len(records),
            'data': [_record_payload(record, settings) for record in records],
        },
        headers={'Cache-Control': f'private, max-age={TTL.ADMIN_URLS_CACHE}'},
    )


def backup_urls(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO) -> LambdaResponse:
    records = url_dao.list_all()
    export_date = datetime.now(UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
    return response_json(
        200,
        {
            'exportDate': export_date,
            'count': len(records),
            'urls': [record.to_dict() for record in records],
        },
        headers={'Content-Disposition': 'attachment; filename="urls-backup.json"'},
        indent=2,
    )


def check_admin_rate_limit(request: Request, settings: AppSettings, rate_limit_dao: RateLimitBaseDAO) -> None:
    """Consume one admin hit for the client

    Raises:
        RateLimitError: if the client's admin budget for this window is spent.
    """
    limit, window_ms = settings.admin_rate_limit
    rate = rate_limit_dao.hit(ADMIN_PURPOSE, request.client_id, limit, window_ms)
    if not rate.allowed:
        logger.info(
            'Admin rate limit exceeded. Responding with 429.',
            extra={'clientId': request.client_id, 'count': rate.count, 'limit': rate.limit, 'event': RATE_LIMITED},
        )
        raise RateLimitError(retry_after=rate.retry_after(int(time.time() * 1000)))


def dispatch_api(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, rate_limit_dao: RateLimitBaseDAO) -> LambdaResponse:
    """Rate limit, then route an authenticated admin API request

    Returns:
        LambdaResponse: handler response, or a JSON `{"error": ...}` response
                        with the status code of the raised SlugShortenerError.
                        Unknown endpoints get 404 `{"error": "Not found"}`.
    """
    path = _api_path(request.path)
    method = request.method

    try:
        check_admin_rate_limit(request, settings, rate_limit_dao)

        if path == URLS_PATH and method == 'GET':
            return list_urls(request, settings, url_dao)
        if path == URLS_PATH and method == 'POST':
            return create_url(request, settings, url_dao)
        if path == BACKUP_PATH and method == 'GET':
            return backup_urls(request, settings, url_dao)

        match = URL_ITEM_RE.match(path)
        if match and method == 'PUT':
            return update_url(request, settings, url_dao, match.group('slug'))
        if match and method == 'DELETE':
            return delete_url(request, settings, url_dao, match.group('slug'))
    except SlugShortenerError as error:
        logger.info(
            'Admin API request rejected. Responding with %d.',
            error.status_code,
            extra={'path': path, 'method': method, 'errorCode': error.error_code, 'event': REQUEST_REJECTED},
        )
        return response_error(error)

    return response_json(404, {'error': 'Not found'})
