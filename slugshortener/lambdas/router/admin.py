"""Admin subtree: owner authentication, HTML pages and form actions

HTML routes (session cookie required, except login):
    GET  /admin                  dashboard with every record and a create form
    GET  /admin/edit/{slug}      edit form for one record
    POST /admin/create           form wrapper around POST /admin/urls
    POST /admin/update/{slug}    form wrapper around PUT /admin/urls/{slug}
    POST /admin/delete/{slug}    form wrapper around DELETE /admin/urls/{slug}
    GET  /admin/login            login form
    POST /admin/login            check password, issue session cookie
    POST /admin/logout           clear session cookie

API routes (session cookie or bearer token) are served by
slugshortener.lambdas.router.api.

Form wrappers never touch the store themselves: they translate the form into an
API request, run it through dispatch_api() (rate limit included) and render the
dashboard again with a banner describing the outcome.
"""

import re
import json
import logging
from datetime import datetime, timedelta, UTC

from slugshortener.constants import SESSION_COOKIE
from slugshortener.dao.base import URLRecordBaseDAO, RateLimitBaseDAO
from slugshortener.exceptions import AuthenticationError
from slugshortener.models import URLRecordModel
from slugshortener.types import LambdaResponse
from slugshortener.utils import get_short_url
from slugshortener.utils.auth import (
    verify_session,
    verify_bearer,
    verify_password,
    session_cookie,
    clear_session_cookie,
)
from slugshortener.utils.config import AppSettings
from slugshortener.utils.rendering import render
from slugshortener.lambdas.router.api import dispatch_api, URLS_PATH, BACKUP_PATH
from slugshortener.lambdas.router.request import Request
from slugshortener.lambdas.router.responses import (
    response_error,
    response_html,
    response_text,
    response_redirect,
)
from slugshortener.lambdas.router.constants import (
    UNAUTHORIZED,
    LOGIN_SUCCESS,
    LOGIN_FAILED,
    LOGOUT,
)


logger = logging.getLogger(__name__)

ADMIN_PATH = '/admin'
LOGIN_PATH = '/admin/login'
LOGOUT_PATH = '/admin/logout'
CREATE_PATH = '/admin/create'
EDIT_RE = re.compile(r'^/admin/edit/(?P<slug>[^/]+)$')
FORM_ACTION_RE = re.compile(r'^/admin/(?P<action>update|delete)/(?P<slug>[^/]+)$')


def is_api_path(path: str) -> bool:
    return (
        path == '/api'
        or path.startswith('/api/')
        or path == URLS_PATH
        or path.startswith(f'{URLS_PATH}/')
        or path == BACKUP_PATH
    )


def has_valid_session(request: Request, settings: AppSettings) -> bool:
    return verify_session(request.cookies.get(SESSION_COOKIE), settings.api_secret) is not None


def is_authenticated(request: Request, settings: AppSettings, allow_bearer: bool) -> bool:
    """Return True if the request carries an owner credential

    HTML routes only accept the session cookie; API routes also accept
    `Authorization: Bearer <secret>`.
    """
    if has_valid_session(request, settings):
        return True
    return allow_bearer and verify_bearer(request.header('authorization'), settings.api_secret)


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


def _message(kind: str, text: str) -> dict[str, str]:
    return {'kind': kind, 'text': text}


def _created_at(record: URLRecordModel) -> datetime:
    try:
        created = datetime.fromisoformat(record.created)
    except ValueError:
        return datetime.min.replace(tzinfo=UTC)
    return created if created.tzinfo else created.replace(tzinfo=UTC)


def render_login_page(message: dict[str, str] | None = None, status: int = 200) -> LambdaResponse:
    return response_html(status, render('login.html', message=message), headers={'Cache-Control': 'no-store'})


def render_admin_page(url_dao: URLRecordBaseDAO, message: dict[str, str] | None = None, status: int = 200) -> LambdaResponse:
    records = url_dao.list_all()
    day_ago = datetime.now(UTC) - timedelta(days=1)
    created_today = sum(1 for record in records if _created_at(record) > day_ago)
    return response_html(
        status,
        render('admin.html', records=records, created_today=created_today, message=message),
        headers={'Cache-Control': 'no-store'},
    )


def render_edit_page(settings: AppSettings, url_dao: URLRecordBaseDAO, slug: str) -> LambdaResponse:
    record = url_dao.get(slug.lower())
    if record is None:
        return response_text(404, 'Not found')
    return response_html(
        200,
        render('edit.html', record=record, short_url=get_short_url(record.slug, settings.domain)),
        headers={'Cache-Control': 'no-store'},
    )


# ---------------------------------------------------------------------------
# Authentication routes
# ---------------------------------------------------------------------------


def login(request: Request, settings: AppSettings) -> LambdaResponse:
    password = request.form().get('password', '')
    if not password:
        return render_login_page(_message('error', 'Password is required'))

    if not verify_password(password, settings.api_secret):
        logger.warning('Failed admin login attempt.', extra={'clientId': request.client_id, 'event': LOGIN_FAILED})
        return render_login_page(_message('error', 'Invalid password'))

    logger.info('Admin logged in.', extra={'clientId': request.client_id, 'event': LOGIN_SUCCESS})
    return response_redirect(
        302,
        ADMIN_PATH,
        headers={'Set-Cookie': session_cookie(settings.api_secret, secure=request.is_secure)},
    )


def logout(request: Request) -> LambdaResponse:
    logger.info('Admin logged out.', extra={'clientId': request.client_id, 'event': LOGOUT})
    return response_redirect(
        302,
        LOGIN_PATH,
        headers={'Set-Cookie': clear_session_cookie(secure=request.is_secure)},
    )


# ---------------------------------------------------------------------------
# Form actions
# ---------------------------------------------------------------------------


def run_form_action(
    request: Request,
    settings: AppSettings,
    url_dao: URLRecordBaseDAO,
    rate_limit_dao: RateLimitBaseDAO,
    *,
    method: str,
    path: str,
    payload: dict | None,
    success_text: str,
) -> LambdaResponse:
    """Replay a form submission as an API request and show its outcome on the dashboard"""
    api_request = Request(
        method=method,
        path=path,
        headers={'content-type': 'application/json'},
        body=json.dumps(payload) if payload is not None else '',
        client_id=request.client_id,
        is_secure=request.is_secure,
    )
    api_response = dispatch_api(api_request, settings, url_dao, rate_limit_dao)
    status = api_response['statusCode']

    if 200 <= status < 300:
        body = json.loads(api_response['body'])
        slug = body.get('data', {}).get('slug') or path.rsplit('/', 1)[-1]
        return render_admin_page(url_dao, _message('success', success_text.format(slug=slug)))

    error = json.loads(api_response['body']).get('error', 'Request failed')
    return render_admin_page(url_dao, _message('error', error), status=status)


def handle_form_action(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, rate_limit_dao: RateLimitBaseDAO) -> LambdaResponse | None:
    form = request.form()

    if request.path == CREATE_PATH:
        return run_form_action(
            request,
            settings,
            url_dao,
            rate_limit_dao,
            method='POST',
            path=URLS_PATH,
            payload={'url': form.get('url', ''), 'slug': form.get('slug', '')},
            success_text='Created short URL: /{slug}',
        )

    match = FORM_ACTION_RE.match(request.path)
    if match is None:
        return None

    slug = match.group('slug')
    if match.group('action') == 'update':
        return run_form_action(
            request,
            settings,
            url_dao,
            rate_limit_dao,
            method='PUT',
            path=f'{URLS_PATH}/{slug}',
            payload={'url': form.get('url', '')},
            success_text='Updated URL: /{slug}',
        )
    return run_form_action(
        request,
        settings,
        url_dao,
        rate_limit_dao,
        method='DELETE',
        path=f'{URLS_PATH}/{slug}',
        payload=None,
        success_text='Deleted URL: /{slug}',
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def handle_admin_request(request: Request, settings: AppSettings, url_dao: URLRecordBaseDAO, rate_limit_dao: RateLimitBaseDAO) -> LambdaResponse:
    """Authenticate and dispatch a request below /admin or /api

    HTTP responses:
        200: HTML page, or API result
        302: Login/logout redirects, or unauthenticated HTML page request
        401: Unauthenticated API request or form submission
        404: Unknown admin route
    """
    path = request.path.rstrip('/') or '/'
    method = request.method

    # 1- Login and logout need no credential
    if path == LOGIN_PATH and method == 'GET':
        if has_valid_session(request, settings):
            return response_redirect(302, ADMIN_PATH)
        return render_login_page()
    if path == LOGIN_PATH and method == 'POST':
        return login(request, settings)
    if path == LOGOUT_PATH and method in ('GET', 'POST'):
        return logout(request)

    # 2- Everything else requires the owner
    api = is_api_path(path)
    if not is_authenticated(request, settings, allow_bearer=api):
        logger.info(
            'Unauthenticated admin request.',
            extra={'path': path, 'method': method, 'clientId': request.client_id, 'event': UNAUTHORIZED},
        )
        if method == 'GET' and not api:
            return response_redirect(302, LOGIN_PATH)
        return response_error(AuthenticationError(), headers={'WWW-Authenticate': 'Bearer'})

    # 3- API requests (JSON)
    if api:
        return dispatch_api(request, settings, url_dao, rate_limit_dao)

    # 4- HTML pages and form actions
    if method == 'GET':
        if path == ADMIN_PATH:
            return render_admin_page(url_dao)
        match = EDIT_RE.match(path)
        if match:
            return render_edit_page(settings, url_dao, match.group('slug'))
    elif method == 'POST':
        response = handle_form_action(request, settings, url_dao, rate_limit_dao)
        if response is not None:
            return response

    return response_text(404, 'Not found')
