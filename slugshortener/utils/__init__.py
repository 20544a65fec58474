from slugshortener.utils.config import app_env, app_name, app_prefix, load_config, load_settings, AppSettings
from slugshortener.utils.helpers import get_short_url, require_environment, guarantee_500_response
from slugshortener.utils.logging import initialize_logging


__all__ = [
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'load_settings',
    'AppSettings',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
