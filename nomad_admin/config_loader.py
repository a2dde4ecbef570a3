"""
Configuration loading utilities for the Nomad admin app.

Loads config.yaml, deep-merges it over built-in defaults and applies
environment overrides for the backend credentials.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging
from copy import deepcopy

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.yaml")

# Environment variables that take precedence over config.yaml
ENV_OVERRIDES = {
    ('supabase', 'url'): 'SUPABASE_URL',
    ('supabase', 'key'): 'SUPABASE_KEY',
}

# Global configuration cache
_config_cache: Optional[Dict[str, Any]] = None


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get the built-in default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Nomad Life Admin',
            'version': '1.0.0',
            'debug': False
        },
        'supabase': {
            'url': '',
            'key': ''
        },
        'storage': {
            'buckets': {
                'spaces': 'spaces',
                'events': 'events',
                'blogs': 'blogs'
            },
            'cache_control': '3600',
            'upsert': True
        },
        'uploads': {
            'max_image_size_mb': 5,
            'image_types': ['image/jpeg', 'image/jpg', 'image/png', 'image/webp'],
            'max_video_size_mb': 50,
            'video_types': ['video/mp4', 'video/webm', 'video/quicktime']
        },
        'ui': {
            'page_title': 'Nomad Life Admin',
            'sidebar_title': 'Navigation',
            'page_size': 25
        },
        'auth': {
            'enabled': False
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }
    }


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides on top of the loaded config."""
    for (section, key), env_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config.setdefault(section, {})[key] = value.strip()
            logger.debug(f"Configuration {section}.{key} taken from ${env_name}")
    return config


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.

    A missing, empty or unreadable file falls back to the defaults; it is
    never fatal.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = CONFIG_FILE

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return _apply_env_overrides(default_config)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)

        if user_config is None:
            logger.warning(f"Configuration file is empty: {config_path}")
            return _apply_env_overrides(default_config)

        if not isinstance(user_config, dict):
            logger.error(f"Configuration file is not a valid dictionary: {config_path}")
            logger.info("Using default configuration")
            return _apply_env_overrides(default_config)

        config = deep_merge(default_config, user_config)

        logger.info(f"Successfully loaded configuration from {config_path}")
        return _apply_env_overrides(config)

    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {config_path}: {e}")
        logger.info("Using default configuration")
        return _apply_env_overrides(default_config)

    except (IOError, OSError) as e:
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        logger.info("Using default configuration")
        return _apply_env_overrides(default_config)


def get_config() -> Dict[str, Any]:
    """Return the cached configuration, loading it on first use."""
    global _config_cache

    if _config_cache is None:
        _config_cache = load_config()

    return _config_cache


def reload_config() -> Dict[str, Any]:
    """
    Force reload of configuration from file.
    Useful for testing or when configuration changes.
    """
    global _config_cache
    _config_cache = None
    return get_config()


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        section: Configuration section (e.g., 'supabase', 'ui')
        key: Configuration key within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    config = get_config()
    section_values = config.get(section) or {}
    if not isinstance(section_values, dict):
        return default
    return section_values.get(key, default)


def get_bucket_name(bucket: str) -> str:
    """Resolve a logical bucket name (spaces, events, blogs) to the configured one."""
    buckets = get_config_value('storage', 'buckets', {}) or {}
    return buckets.get(bucket, bucket)


def require_config_value(section: str, key: str) -> Any:
    """
    Get a configuration value that must be present.

    Raises:
        ConfigurationError: If the value is missing or blank
    """
    value = get_config_value(section, key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigurationError(f"{section}.{key}")
    return value


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary to validate

    Returns:
        List of problems found (empty when the configuration is usable)
    """
    problems: List[str] = []

    for section in ['app', 'supabase', 'storage', 'uploads', 'ui', 'logging']:
        if not isinstance(config.get(section), dict):
            problems.append(f"Missing configuration section: {section}")

    if problems:
        return problems

    supabase = config['supabase']
    if not supabase.get('url'):
        problems.append("supabase.url is not set")
    elif not str(supabase['url']).startswith(('http://', 'https://')):
        problems.append("supabase.url must start with http:// or https://")
    if not supabase.get('key'):
        problems.append("supabase.key is not set")

    buckets = config['storage'].get('buckets', {})
    for bucket in ['spaces', 'events', 'blogs']:
        if not isinstance(buckets.get(bucket), str) or not buckets.get(bucket):
            problems.append(f"storage.buckets.{bucket} must be a non-empty string")

    uploads = config['uploads']
    for key in ['max_image_size_mb', 'max_video_size_mb']:
        try:
            if float(uploads.get(key, 0)) <= 0:
                problems.append(f"uploads.{key} must be positive")
        except (TypeError, ValueError):
            problems.append(f"uploads.{key} must be a number")

    level = str(config['logging'].get('level', 'INFO')).upper()
    if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        problems.append(f"logging.level '{level}' is not a valid level")

    for problem in problems:
        logger.warning(f"Configuration problem: {problem}")

    return problems


def get_config_summary(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get a summary of the current configuration (without secrets).

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary with configuration summary
    """
    supabase = config.get('supabase', {})
    return {
        'app_name': config.get('app', {}).get('name', 'Unknown'),
        'app_version': config.get('app', {}).get('version', 'Unknown'),
        'backend_url': supabase.get('url') or 'not configured',
        'api_key_set': bool(supabase.get('key')),
        'buckets': dict(config.get('storage', {}).get('buckets', {})),
        'auth_enabled': bool(config.get('auth', {}).get('enabled', False)),
        'log_level': config.get('logging', {}).get('level', 'INFO')
    }
