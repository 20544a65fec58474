import time
import logging

from slugshortener.constants import TTL
from slugshortener.dao.redis import URLRecordRedisDAO, RateLimitRedisDAO
from slugshortener.dao.base import URLRecordBaseDAO, RateLimitBaseDAO
from slugshortener.exceptions import ValidationError
from slugshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from slugshortener.utils import load_settings, guarantee_500_response
from slugshortener.utils.config import AppSettings
from slugshortener.utils.crawlers import is_social_crawler, render_preview
from slugshortener.utils.slugs import is_valid_custom_slug
from slugshortener.lambdas.router.admin import handle_admin_request
from slugshortener.lambdas.router.request import Request
from slugshortener.lambdas.router.responses import (
    response_json,
    response_error,
    response_html,
    response_text,
    response_redirect,
)
from slugshortener.lambdas.router.constants import (
    HEALTH_CHECK,
    PUBLIC_LISTING,
    HOME_REDIRECT,
    INVALID_SLUG,
    RATE_LIMITED,
    URL_NOT_FOUND,
    CRAWLER_PREVIEW,
    REDIRECT_SUCCESS,
    REDIRECT_PURPOSE,
)


logger = logging.getLogger(__name__)

HEALTH_PATHS = ('/health', '/status')
ADMIN_PREFIXES = ('/admin', '/api')


def is_under(path: str, prefix: str) -> bool:
    """Return True if `path` is `prefix` itself or lies below it."""
    return path == prefix or path.startswith(f'{prefix}/')


def handle_health() -> LambdaResponse:
    logger.debug('Health check requested.', extra={'event': HEALTH_CHECK})
    return response_text(200, 'OK')


def handle_public_listing(url_dao: URLRecordBaseDAO) -> LambdaResponse:
    records = url_dao.list_all()
    logger.debug('Serving public listing of %d URL records.', len(records), extra={'event': PUBLIC_LISTING})
    return response_json(
        200,
        [record.to_dict() for record in records],
        headers={'Cache-Control': f'public, max-age={TTL.ALL_URLS_CACHE}'},
        indent=2,
    )


def handle_redirect(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, rate_limit_dao: RateLimitBaseDAO) -> LambdaResponse:
    """Resolve a slug and send the client (or a preview crawler) to its destination

    HTTP responses:
        200: Open Graph preview page (social media crawlers only)
        301: Redirect to destination URL
            headers:
                Location: destination URL
        400: Slug has an invalid format
        404: Slug has no record
        429: Client exceeded the redirect rate limit
    """
    # 1- Extract slug from request's path
    slug = request.path.lstrip('/').lower()
    if not is_valid_custom_slug(slug):
        logger.info('Invalid slug in path. Responding with 400.', extra={'slug': slug, 'event': INVALID_SLUG})
        return response_text(400, 'Invalid URL')

    # 2- Hit the client's redirect rate limit
    limit, window_ms = settings.redirect_rate_limit
    rate = rate_limit_dao.hit(REDIRECT_PURPOSE, request.client_id, limit, window_ms)
    if not rate.allowed:
        retry_after = rate.retry_after(int(time.time() * 1000))
        logger.info(
            'Redirect rate limit exceeded. Responding with 429.',
            extra={'clientId': request.client_id, 'count': rate.count, 'limit': rate.limit, 'event': RATE_LIMITED},
        )
        return response_text(429, 'Rate limit exceeded', headers={'Retry-After': str(retry_after)})

    # 3- Get URL record from database
    record = url_dao.get(slug)
    if record is None:
        logger.info('URL record not found in database. Responding with 404.', extra={'slug': slug, 'event': URL_NOT_FOUND})
        return response_text(404, 'Not found')

    # 4a- Serve link preview to social media crawlers
    user_agent = request.header('user-agent')
    if is_social_crawler(user_agent):
        logger.info(
            'Serving link preview to social media crawler. Responding with 200.',
            extra={'slug': slug, 'userAgent': user_agent, 'event': CRAWLER_PREVIEW},
        )
        return response_html(200, render_preview(record), headers={'Cache-Control': f'public, max-age={TTL.CRAWLER_PREVIEW_CACHE}'})

    # 4b- Redirect everyone else to the destination
    logger.info('Redirecting client to destination URL. Responding with 301.', extra={'slug': slug, 'event': REDIRECT_SUCCESS})
    return response_redirect(301, record.url, headers={'Cache-Control': 'no-store'})


def route(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, rate_limit_dao: RateLimitBaseDAO) -> LambdaResponse:
    """Dispatch a request by path, first match wins

    Order: health, public listing, admin subtree, root, slug redirect.
    """
    path = request.path

    if path in HEALTH_PATHS:
        return handle_health()
    if path == '/all.json':
        return handle_public_listing(url_dao)
    if any(is_under(path, prefix) for prefix in ADMIN_PREFIXES):
        return handle_admin_request(request, settings, url_dao, rate_limit_dao)
    if path in ('', '/'):
        logger.debug('Root path requested. Redirecting to home URL.', extra={'event': HOME_REDIRECT})
        return response_redirect(302, settings.home_url)
    return handle_redirect(request, settings, url_dao, rate_limit_dao)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle every API Gateway request for the short link service

    This Lambda handler follows this procedure:
    - Step 1: Parse the API Gateway event into a Request
    - Step 2: Answer health checks without touching the database
    - Step 3: Load application settings (once per container)
    - Step 4: Create DAOs for URL records and rate limit counters
    - Step 5: Route the request to its handler

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'httpMethod': 'GET', 'path': '/brave-otter', 'headers': {}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode'], response['headers']['Location']
        (301, 'https://example.com/my-page')
    """
    # 1- Parse request
    try:
        request = Request.from_event(event)
    except ValidationError as error:
        return response_error(error)

    # 2- Health checks are answered even when the database is down
    if request.path in HEALTH_PATHS:
        return handle_health()

    # 3- Get application's settings
    settings = load_settings()

    # 4- Create DAOs sharing a single Redis connection
    url_dao = URLRecordRedisDAO(**settings.redis, prefix=settings.prefix)
    rate_limit_dao = RateLimitRedisDAO(redis_client=url_dao.redis, prefix=settings.prefix)

    # 5- Route request
    return route(request, settings, url_dao, rate_limit_dao)
