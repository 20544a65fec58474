"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. Configuration loading behavior
   - Ensures load_config() returns the function's section of the AppConfig document.
   - Ensures load_config() raises ClientError when AppConfig calls fail.
   - Ensures missing AppConfig identifiers raise KeyError.

3. API secret resolution
   - Environment variable and Secrets Manager sources.
   - Missing or malformed secrets raise configuration errors.

4. Settings composition
   - Environment overrides, defaults, Redis kwargs and validation.
"""

import os
import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import botocore

from slugshortener.constants import RateLimit, Timeout, DEFAULT_HOME_URL
from slugshortener.exceptions import ConfigurationError, BadConfigurationError
from slugshortener.utils import config


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')
    for name in ('DOMAIN', 'HOME_URL', 'API_SECRET', 'API_SECRET_NAME', 'APPCONFIG_AGENT_URL'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    config.load_settings.cache_clear()
    yield
    config.load_settings.cache_clear()


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'configs': {
            'router': {
                'redis': {
                    'host': 'monkey',
                    'port': 6380,
                    'db': 3
                },
                'domain': 'sho.rt',
                'home_url': 'https://home.example.com'
            }
        },
    }
    # fmt: on


@pytest.fixture
def mock_appconfig(monkeypatch, appconfig_payload):
    client = MagicMock()
    client.start_configuration_session.return_value = {'InitialConfigurationToken': 'monkey_token'}
    client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}
    monkeypatch.setattr(config.boto3, 'client', lambda service, **kwargs: client)
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_ENV', 'Dev')
    assert config.app_env() == 'dev'


def test_app_env_defaults_to_local(monkeypatch):
    monkeypatch.delenv('APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_NAME', 'slugshortener')
    assert config.app_name() == 'slugshortener'


def test_app_prefix(monkeypatch):
    monkeypatch.setitem(os.environ, 'APP_NAME', 'slugshortener')
    monkeypatch.setitem(os.environ, 'APP_ENV', 'test')
    assert config.app_prefix() == 'slugshortener:test'


def test_app_prefix_without_app_name(monkeypatch):
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_prefix() is None


# -------------------------------
# 2. Configuration loading behavior
# -------------------------------


def test_load_config(mock_appconfig):
    """Ensure load_config() returns plain keys plus the active backend's section."""
    result = config.load_config('router')

    assert result == {
        'redis': {'host': 'monkey', 'port': 6380, 'db': 3},
        'domain': 'sho.rt',
        'home_url': 'https://home.example.com',
    }
    mock_appconfig.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    mock_appconfig.get_latest_configuration.assert_called_once_with(ConfigurationToken='monkey_token')


def test_load_config_propagates_client_error(monkeypatch):
    client = MagicMock()
    client.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException'}}, 'StartConfigurationSession'
    )
    monkeypatch.setattr(config.boto3, 'client', lambda service, **kwargs: client)

    with pytest.raises(botocore.exceptions.ClientError):
        config.load_config('router')


def test_load_config_requires_appconfig_ids(monkeypatch):
    monkeypatch.delenv('APPCONFIG_PROFILE_ID')

    with pytest.raises(KeyError, match='APPCONFIG_PROFILE_ID'):
        config.load_config('router')


# -------------------------------
# 3. API secret resolution
# -------------------------------


def test_api_secret_from_environment(monkeypatch):
    monkeypatch.setenv('API_SECRET', 'env-secret')
    assert config.load_api_secret() == 'env-secret'


def test_api_secret_missing():
    with pytest.raises(ConfigurationError, match='API_SECRET'):
        config.load_api_secret()


def test_api_secret_from_secrets_manager(monkeypatch):
    monkeypatch.setenv('API_SECRET_NAME', 'slugshortener/test/api-secret')
    monkeypatch.setenv('API_SECRET', 'ignored')
    client = MagicMock()
    client.get_secret_value.return_value = {'SecretString': json.dumps({'api_secret': 'sm-secret'})}

    assert config.load_api_secret(secrets_client=client) == 'sm-secret'
    client.get_secret_value.assert_called_once_with(SecretId='slugshortener/test/api-secret')


@pytest.mark.parametrize(
    'secret_string',
    [
        'not json',
        json.dumps({'other': 'field'}),
        json.dumps({'api_secret': ''}),
        json.dumps(['api_secret']),
    ],
)
def test_api_secret_malformed_payload(monkeypatch, secret_string):
    monkeypatch.setenv('API_SECRET_NAME', 'slugshortener/test/api-secret')
    client = MagicMock()
    client.get_secret_value.return_value = {'SecretString': secret_string}

    with pytest.raises(BadConfigurationError):
        config.load_api_secret(secrets_client=client)


def test_api_secret_client_error(monkeypatch):
    monkeypatch.setenv('API_SECRET_NAME', 'slugshortener/test/api-secret')
    client = MagicMock()
    client.get_secret_value.side_effect = botocore.exceptions.ClientError({'Error': {'Code': 'AccessDeniedException'}}, 'GetSecretValue')

    with pytest.raises(botocore.exceptions.ClientError):
        config.load_api_secret(secrets_client=client)


# -------------------------------
# 4. Settings composition
# -------------------------------


def test_load_settings(monkeypatch, mock_appconfig):
    monkeypatch.setenv('API_SECRET', 'env-secret')
    monkeypatch.setattr(config, 'app_prefix', lambda: 'slugshortener:test')

    settings = config.load_settings()

    assert settings.domain == 'sho.rt'
    assert settings.home_url == 'https://home.example.com'
    assert settings.api_secret == 'env-secret'
    assert settings.redis == {'redis_host': 'monkey', 'redis_port': 6380, 'redis_db': 3}
    assert settings.prefix == 'slugshortener:test'
    assert settings.metadata_timeout_ms == Timeout.METADATA_FETCH_MS
    assert settings.redirect_rate_limit == RateLimit.REDIRECT
    assert settings.admin_rate_limit == RateLimit.ADMIN
    assert 'env-secret' not in repr(settings)


def test_load_settings_is_computed_once(monkeypatch, mock_appconfig):
    monkeypatch.setenv('API_SECRET', 'env-secret')

    assert config.load_settings() is config.load_settings()
    mock_appconfig.start_configuration_session.assert_called_once()


def test_load_settings_environment_overrides(monkeypatch, mock_appconfig):
    monkeypatch.setenv('API_SECRET', 'env-secret')
    monkeypatch.setenv('DOMAIN', 'go.example.org')
    monkeypatch.setenv('HOME_URL', 'https://example.org/')

    settings = config.load_settings()

    assert settings.domain == 'go.example.org'
    assert settings.home_url == 'https://example.org/'


def test_load_settings_default_home_url(monkeypatch):
    monkeypatch.setenv('API_SECRET', 'env-secret')
    monkeypatch.setattr(config, 'load_config', lambda name: {'domain': 'sho.rt', 'redis': {'host': 'redis'}})

    assert config.load_settings().home_url == DEFAULT_HOME_URL


def test_load_settings_requires_domain(monkeypatch):
    monkeypatch.setenv('API_SECRET', 'env-secret')
    monkeypatch.setattr(config, 'load_config', lambda name: {'redis': {'host': 'redis'}})

    with pytest.raises(BadConfigurationError, match='domain'):
        config.load_settings()


def test_load_settings_requires_redis(monkeypatch):
    monkeypatch.setenv('API_SECRET', 'env-secret')
    monkeypatch.setattr(config, 'load_config', lambda name: {'domain': 'sho.rt'})

    with pytest.raises(BadConfigurationError, match='redis'):
        config.load_settings()


def test_load_settings_incomplete_appconfig(monkeypatch):
    monkeypatch.delenv('APPCONFIG_APP_ID')

    with pytest.raises(ConfigurationError, match='Incomplete AppConfig setup'):
        config.load_settings()
