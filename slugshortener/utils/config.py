"""Utility functions for application configuration management.

Non-secret configuration lives in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is
stored as a JSON document under a configuration profile (typically
`backend-config`):

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "router": {
                "redis": {"host": "...", "port": 6379, "db": 0},
                "domain": "sho.rt",
                "home_url": "https://example.com"
            }
        }
    }

The shared owner secret (login password and API bearer token) is read from
**AWS Secrets Manager** when `API_SECRET_NAME` is set, otherwise from the
`API_SECRET` environment variable.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return the key prefix for DAOs, or None if `APP_NAME` is not set.

    load_config(function_name: str) -> dict
        Load the configuration section of one function from AWS AppConfig
        (or from a local AppConfig agent when running under SAM).

    load_api_secret() -> str
        Resolve the shared owner secret.

    load_settings() -> AppSettings
        Compose everything into one immutable settings value (once per container).

Example:
    Typical usage inside a Lambda handler:

        >>> from slugshortener.utils.config import load_settings
        >>> settings = load_settings()
        >>> settings.domain
        'sho.rt'
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass, field
from typing import Any
from collections.abc import Callable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from slugshortener.constants import ENV, DEFAULT_HOME_URL, RateLimit, Timeout
from slugshortener.exceptions import BadConfigurationError, ConfigurationError
from slugshortener.types import SecretsManagerClient
from slugshortener.utils.helpers import require_environment
from slugshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)

FUNCTION_NAME = 'router'


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'"""
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'slugshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'slugshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _select_section(document: dict, function_name: str) -> dict:
    """Pick the function's section of an AppConfig document

    The active backend's connection settings are kept under their backend name
    and every other key of the section (domain, home_url, ...) is passed through.
    """
    backend = document['active_backend']
    section = document['configs'][function_name]
    data = {k: v for k, v in section.items() if not isinstance(v, dict)}
    data[backend] = section[backend]
    return data


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise ValueError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise ValueError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise ValueError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper(function_name: str, *args, **kwargs) -> dict:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(function_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'functionName': function_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        logger.debug('Loaded AppConfig from local agent.', extra={'functionName': function_name, 'build': document.get('build')})
        return _select_section(document, function_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(function_name: str) -> dict:
    """Load configuration for a given function from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        function_name (str):
            Section of the AppConfig document to return (e.g., "router").

    Returns:
        dict: The function's config section as a Python dictionary.

    Example:
        >>> app_config = load_config('router')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'functionName': function_name})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'functionName': function_name, 'build': document.get('build')})
    return _select_section(document, function_name)


def load_api_secret(secrets_client: SecretsManagerClient | None = None) -> str:
    """Resolve the shared owner secret

    Sources, in order:
        - Secrets Manager secret named by `API_SECRET_NAME`, as JSON {"api_secret": "..."};
        - `API_SECRET` environment variable.

    Raises:
        ConfigurationError:
            If no non-empty secret can be resolved.
        botocore.exceptions.BotoCoreError / ClientError:
            On AWS Secrets Manager API failures.
    """
    secret_name = os.environ.get(ENV.App.API_SECRET_NAME)
    if not secret_name:
        secret = os.environ.get(ENV.App.API_SECRET)
        if not secret:
            raise ConfigurationError(f"Missing required environment variable '{ENV.App.API_SECRET}'")
        return secret

    # fmt: off
    secrets_client_kwargs = {
        'endpoint_url': os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'),
    } if running_locally() else {}
    # fmt: on
    sm = secrets_client or boto3.client('secretsmanager', **secrets_client_kwargs)

    try:
        raw = sm.get_secret_value(SecretId=secret_name).get('SecretString')
        payload = json.loads(raw or '{}')
    except (BotoCoreError, ClientError):
        raise
    except json.JSONDecodeError as e:
        raise BadConfigurationError('Invalid JSON in API secret payload') from e

    secret = payload.get('api_secret') if isinstance(payload, dict) else None
    if not secret:
        raise BadConfigurationError('API secret payload must contain a non-empty "api_secret" field')
    return secret


@dataclass(frozen=True)
class AppSettings:
    """Immutable process-wide configuration, passed explicitly to every component.

    Attributes:
        api_secret (str):
            Shared owner secret: login password and API bearer token.
        domain (str):
            Public domain used to compose short URLs, e.g. 'sho.rt'.
        home_url (str):
            Destination of requests to the root path.
        redis (dict):
            Redis connection kwargs for the DAOs (`redis_host`, `redis_port`, ...).
        prefix (str | None):
            Namespace prefix for all keys.
        metadata_timeout_ms (int):
            Timeout for destination page metadata fetches.
        redirect_rate_limit / admin_rate_limit (tuple[int, int]):
            (limit, window in ms) for redirect and admin API traffic.
    """

    api_secret: str = field(repr=False)
    domain: str
    home_url: str = DEFAULT_HOME_URL
    redis: dict[str, Any] = field(default_factory=dict)
    prefix: str | None = None
    metadata_timeout_ms: int = Timeout.METADATA_FETCH_MS
    redirect_rate_limit: tuple[int, int] = RateLimit.REDIRECT
    admin_rate_limit: tuple[int, int] = RateLimit.ADMIN


@functools.cache
def load_settings() -> AppSettings:
    """Build AppSettings from AppConfig, Secrets Manager and the environment

    Computed once per Lambda container; environment variables `DOMAIN` and
    `HOME_URL` override the AppConfig values.

    Raises:
        ConfigurationError:
            If required configuration is missing or malformed.
    """
    try:
        app_config = load_config(FUNCTION_NAME)
    except KeyError as e:
        raise ConfigurationError(f'Incomplete AppConfig setup: {e}') from e

    domain = os.environ.get(ENV.App.DOMAIN) or app_config.get('domain')
    if not domain:
        raise BadConfigurationError("Missing public 'domain' for short URLs")

    try:
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    except (KeyError, AttributeError) as e:
        raise BadConfigurationError("Missing 'redis' backend configuration") from e

    return AppSettings(
        api_secret=load_api_secret(),
        domain=domain,
        home_url=os.environ.get(ENV.App.HOME_URL) or app_config.get('home_url') or DEFAULT_HOME_URL,
        redis=redis_config,
        prefix=app_prefix(),
        metadata_timeout_ms=int(app_config.get('metadata_timeout_ms', Timeout.METADATA_FETCH_MS)),
    )
