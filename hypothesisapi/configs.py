"""Saved settings of the command line tools and of :meth:`Api.from_env`.

A value is looked up in its environment variable first, then in the YAML file
written by ``hypothesis-config``.
"""
import os
import logging
import yaml
from platformdirs import PlatformDirs

USERNAME_KEY = 'username'
APIKEY_KEY = 'api_key'
APIURL_KEY = 'default_api_url'

ENV_VARS = {
    USERNAME_KEY: 'HYPOTHESIS_NAME',
    APIKEY_KEY: 'HYPOTHESIS_KEY',
    APIURL_KEY: 'HYPOTHESIS_API_URL'
}

_LOGGER = logging.getLogger(__name__)

DIRS = PlatformDirs(appname='hypothesisapi')
CONFIG_FILE = os.path.join(DIRS.user_config_dir, 'hypothesisapi.yaml')


def read_config() -> dict[str, str]:
    """Return the saved settings, empty if nothing was saved yet."""
    if not os.path.exists(CONFIG_FILE):
        return {}
    with open(CONFIG_FILE, 'r') as configfile:
        return yaml.safe_load(configfile) or {}


def set_value(key: str, value: str) -> None:
    config = read_config()
    config[key] = value
    os.makedirs(DIRS.user_config_dir, exist_ok=True)
    with open(CONFIG_FILE, 'w') as configfile:
        yaml.safe_dump(config, configfile)
    _LOGGER.debug(f"Saved '{key}' to {CONFIG_FILE}.")


def get_value(key: str, include_envvars: bool = True) -> str | None:
    """Get a setting from its environment variable, else from the saved file. None if unset."""
    if include_envvars and key in ENV_VARS:
        value = os.getenv(ENV_VARS[key])
        if value is not None:
            return value
    return read_config().get(key)


def clear_all_configurations() -> None:
    if os.path.exists(CONFIG_FILE):
        os.remove(CONFIG_FILE)
        _LOGGER.debug(f"Removed {CONFIG_FILE}.")
