import json
import time
from collections import defaultdict
from typing import Any, cast
from urllib.parse import urlencode
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from slugshortener.types import LambdaEvent, LambdaContext
from slugshortener.models import URLRecordModel, PageMetadata, RateLimitInfo
from slugshortener.dao.base import URLRecordBaseDAO, RateLimitBaseDAO
from slugshortener.dao.exceptions import URLRecordAlreadyExistsError, URLRecordNotFoundError
from slugshortener.utils.auth import sign_session
from slugshortener.utils.config import AppSettings
from slugshortener.lambdas.router import app, api


API_SECRET = 'test-secret'  # noqa: S105
CLIENT_IP = '203.0.113.7'


class InMemoryURLRecordDAO(URLRecordBaseDAO):
    """Dict-backed URL record store with the same contract as the Redis DAO"""

    redis = None

    def __init__(self):
        self.records: dict[str, URLRecordModel] = {}

    def insert(self, record, **kwargs):
        if record.slug in self.records:
            raise URLRecordAlreadyExistsError(record.slug)
        self.records[record.slug] = record
        return self

    def put(self, record, **kwargs):
        self.records[record.slug] = record
        return self

    def get(self, slug, **kwargs):
        return self.records.get(slug)

    def update(self, slug, **fields):
        if slug not in self.records:
            raise URLRecordNotFoundError(slug)
        self.records[slug] = self.records[slug].with_changes(**fields)
        return self.records[slug]

    def delete(self, slug, **kwargs):
        return self.records.pop(slug, None) is not None

    def list_all(self, **kwargs):
        return sorted(self.records.values(), key=lambda r: r.created, reverse=True)


class InMemoryRateLimitDAO(RateLimitBaseDAO):
    """Counting rate limiter whose windows never expire"""

    def __init__(self):
        self.counts: dict[tuple[str, str], int] = defaultdict(int)

    def hit(self, purpose, client_id, limit, window_ms, **kwargs):
        self.counts[(purpose, client_id)] += 1
        return RateLimitInfo(count=self.counts[(purpose, client_id)], limit=limit, reset_time=int(time.time() * 1000) + window_ms)


class EventFactory:
    """Build API Gateway proxy events the way API Gateway delivers them"""

    def make(
        self,
        method: str = 'GET',
        path: str = '/',
        headers: dict[str, str] | None = None,
        body: str | None = None,
        source_ip: str | None = CLIENT_IP,
    ) -> LambdaEvent:
        identity = {'sourceIp': source_ip} if source_ip else {}
        return cast(
            LambdaEvent,
            {
                'httpMethod': method,
                'path': path,
                'headers': headers or {},
                'queryStringParameters': None,
                'body': body,
                'isBase64Encoded': False,
                'requestContext': {'identity': identity, 'stage': 'test'},
            },
        )

    def json(self, method: str, path: str, payload: Any = None, token: str | None = API_SECRET, **kwargs) -> LambdaEvent:
        headers = {'Content-Type': 'application/json'}
        if token is not None:
            headers['Authorization'] = f'Bearer {token}'
        return self.make(method, path, headers=headers, body=None if payload is None else json.dumps(payload), **kwargs)

    def form(self, path: str, form: dict[str, str], authenticated: bool = True) -> LambdaEvent:
        headers = {'Content-Type': 'application/x-www-form-urlencoded'}
        if authenticated:
            headers['Cookie'] = self.session_cookie()
        return self.make('POST', path, headers=headers, body=urlencode(form))

    def html(self, path: str, authenticated: bool = True) -> LambdaEvent:
        return self.make('GET', path, headers={'Cookie': self.session_cookie()} if authenticated else {})

    @staticmethod
    def session_cookie(secret: str = API_SECRET) -> str:
        return f'session={sign_session(int(time.time() * 1000), secret)}'


@pytest.fixture
def events() -> EventFactory:
    return EventFactory()


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'router'})


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        api_secret=API_SECRET,
        domain='sho.rt',
        home_url='https://home.example.com',
        redis={'redis_host': 'redis.test'},
        prefix='testapp:test',
    )


@pytest.fixture
def url_dao() -> InMemoryURLRecordDAO:
    return InMemoryURLRecordDAO()


@pytest.fixture
def rate_limit_dao() -> InMemoryRateLimitDAO:
    return InMemoryRateLimitDAO()


@pytest.fixture
def page_metadata() -> PageMetadata:
    return PageMetadata(title='Example Title', description='Example description', image='https://example.com/og.png')


@pytest.fixture(autouse=True)
def setup(monkeypatch: MonkeyPatch, settings, url_dao, rate_limit_dao, page_metadata) -> dict[str, MagicMock]:
    """Patch Lambda dependencies: settings, DAOs and outbound metadata fetches."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)

    mocks = {
        'load_settings': MagicMock(return_value=settings),
        'URLRecordRedisDAO': MagicMock(return_value=url_dao),
        'RateLimitRedisDAO': MagicMock(return_value=rate_limit_dao),
        'fetch_page_metadata': MagicMock(return_value=page_metadata),
    }
    monkeypatch.setattr(app, 'load_settings', mocks['load_settings'])
    monkeypatch.setattr(app, 'URLRecordRedisDAO', mocks['URLRecordRedisDAO'])
    monkeypatch.setattr(app, 'RateLimitRedisDAO', mocks['RateLimitRedisDAO'])
    monkeypatch.setattr(api, 'fetch_page_metadata', mocks['fetch_page_metadata'])
    return mocks


@pytest.fixture
def stored_record(url_dao, page_metadata) -> URLRecordModel:
    record = URLRecordModel(
        url='https://example.com/blog/post',
        slug='brave-otter',
        created='2025-10-15T00:00:00.000Z',
        updated='2025-10-15T00:00:00.000Z',
        metadata=page_metadata,
    )
    url_dao.put(record)
    return record
