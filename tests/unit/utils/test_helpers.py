"""Unit tests for helper functions in helpers.py.

Test coverage includes:

1. get_short_url() composes public short URLs

2. require_environment() decorator behavior
   - 2.1. Ensures decorated functions execute when all env vars are present.
   - 2.2. Ensures missing or empty env vars raise a descriptive KeyError.

3. guarantee_500_response() decorator behavior
"""

import json

import pytest

from slugshortener.utils.helpers import get_short_url, require_environment, guarantee_500_response


# -------------------------------
# 1. Get short url string representation
# -------------------------------


@pytest.mark.parametrize(
    'slug, domain, expected',
    [
        ('brave-otter', 'sho.rt', 'https://sho.rt/brave-otter'),
        ('brave-otter', 'sho.rt/', 'https://sho.rt/brave-otter'),
        ('launch-2025', 'https://go.example.com', 'https://go.example.com/launch-2025'),
        ('abc', 'http://localhost:3000', 'http://localhost:3000/abc'),
    ],
)
def test_get_short_url(slug, domain, expected):
    """Ensure get_short_url() returns the correct short URL string."""
    assert get_short_url(slug, domain) == expected


# -------------------------------
# 2.1. require_environment() happy path
# -------------------------------


def test_require_environment_happy_path(monkeypatch):
    """2.1. Decorated function executes when all env vars are present."""
    monkeypatch.setenv('ENV1', 'value1')
    monkeypatch.setenv('ENV2', 'value2')

    @require_environment('ENV1', 'ENV2')
    def sample_function(x: int) -> int:
        return x + 1

    assert sample_function(1) == 2


# -------------------------------
# 2.2. require_environment() missing or empty env vars
# -------------------------------


@pytest.mark.parametrize(
    'env_setup, missing_names',
    [
        ({'ENV1': None, 'ENV2': 'value2'}, ["'ENV1'"]),
        ({'ENV1': '', 'ENV2': 'value2'}, ["'ENV1'"]),
        ({'ENV1': None, 'ENV2': None}, ["'ENV1'", "'ENV2'"]),
        ({'ENV1': '', 'ENV2': ''}, ["'ENV1'", "'ENV2'"]),
    ],
)
def test_require_environment_missing_or_empty(monkeypatch, env_setup, missing_names):
    """2.2. Missing or empty env vars raise a descriptive KeyError."""
    for name, value in env_setup.items():
        if value is None:
            monkeypatch.delenv(name, raising=False)
        else:
            monkeypatch.setenv(name, value)

    @require_environment('ENV1', 'ENV2')
    def sample_function() -> None:
        pass

    expected_message = f'Missing required environment variables: {", ".join(missing_names)}'
    with pytest.raises(KeyError, match=expected_message):
        sample_function()


# -------------------------------
# 3. guarantee_500_response() behavior
# -------------------------------


def test_guarantee_500_response(monkeypatch):
    """3.1. Faulty lambda handler returns 500 response when not running locally."""
    monkeypatch.setattr('slugshortener.utils.helpers.running_locally', lambda: False)

    @guarantee_500_response
    def faulty_lambda_handler(event, context):
        raise RuntimeError('secret detail')

    response = faulty_lambda_handler({}, None)
    body = json.loads(response['body'])

    assert response['statusCode'] == 500
    assert response['headers']['Content-Type'] == 'application/json'
    assert body == {'error': 'Internal server error', 'error_code': 'UNKNOWN_INTERNAL_SERVER_ERROR'}
    assert 'secret detail' not in response['body']


def test_guarantee_500_response_reraises_when_running_locally(monkeypatch):
    """3.2. Faulty lambda handler reraises the original exception when running locally."""
    monkeypatch.setattr('slugshortener.utils.helpers.running_locally', lambda: True)

    @guarantee_500_response
    def faulty_lambda_handler(event, context):
        raise RuntimeError('boom')

    with pytest.raises(RuntimeError, match='boom'):
        faulty_lambda_handler({}, None)


def test_guarantee_500_response_passes_through(monkeypatch):
    monkeypatch.setattr('slugshortener.utils.helpers.running_locally', lambda: False)

    @guarantee_500_response
    def lambda_handler(event, context):
        return {'statusCode': 204, 'body': ''}

    assert lambda_handler({}, None) == {'statusCode': 204, 'body': ''}
