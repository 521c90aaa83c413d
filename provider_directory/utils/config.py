"""
Configuration and secrets management for the provider directory app.

All settings are read from Streamlit's secrets (``.streamlit/secrets.toml``)
with sensible fallbacks, so the app and the test-suite run without a
secrets file.

Usage:
    from provider_directory.utils.config import get_api_config, get_app_config

    directory_config = get_api_config("directory")
    base_url = directory_config["base_url"]
"""

import logging
from typing import Any, Dict

import streamlit as st

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = ("development", "staging", "production")
VALID_VIEW_MODES = ("list", "map", "split")


def get_secret(key_path: str, default: Any = None) -> Any:
    """
    Safely retrieve a secret from Streamlit's secrets management.

    Args:
        key_path: Dot-notation path to the secret (e.g., 'directory.base_url')
        default: Default value if secret is not found

    Returns:
        The secret value or default if not found

    Examples:
        >>> get_secret('directory.base_url', '')
        >>> get_secret('geocoding.country_codes', 'ba')
        >>> get_secret('app.debug_mode', False)
    """
    try:
        keys = key_path.split(".")
        value = st.secrets

        for key in keys:
            try:
                value = value[key]
            except (KeyError, TypeError, AttributeError):
                return default

        return value
    except Exception as e:
        # st.secrets raises when no secrets file exists at all
        logger.debug(f"Failed to retrieve secret '{key_path}': {e}")
        return default


def get_api_config(api_name: str) -> Dict[str, Any]:
    """
    Get configuration for a specific API or service.

    Args:
        api_name: Name of the API/service ('directory' or 'geocoding')

    Returns:
        Dictionary containing the API configuration
    """
    if api_name == "directory":
        return {
            "base_url": str(get_secret("directory.base_url", "")).rstrip("/"),
            "request_timeout": get_secret("directory.request_timeout", 10),
            "api_token": get_secret("directory.api_token", ""),
        }
    elif api_name == "geocoding":
        return {
            "nominatim_user_agent": get_secret("geocoding.nominatim_user_agent", "provider_directory"),
            "request_timeout": get_secret("geocoding.request_timeout", 10),
            "rate_limit_delay": get_secret("geocoding.rate_limit_delay", 1.0),
            "max_retries": get_secret("geocoding.max_retries", 3),
            "country_codes": get_secret("geocoding.country_codes", "ba"),
        }
    else:
        return {}


def get_app_config() -> Dict[str, Any]:
    """
    Get general application configuration.

    Returns:
        Dictionary containing app configuration
    """
    return {
        "environment": get_secret("app.environment", "production"),
        "debug_mode": get_secret("app.debug_mode", False),
        "log_level": get_secret("app.log_level", "INFO"),
        "default_view": get_secret("app.default_view", "list"),
        "split_view_enabled": get_secret("app.split_view_enabled", True),
    }


def is_api_enabled(api_name: str) -> bool:
    """
    Check if a specific API is enabled and properly configured.

    Args:
        api_name: Name of the API to check

    Returns:
        True if the API has its required configuration
    """
    if api_name == "directory":
        return bool(get_api_config("directory")["base_url"])
    elif api_name == "geocoding":
        return bool(get_api_config("geocoding")["nominatim_user_agent"])
    else:
        return False


def validate_configuration() -> Dict[str, str]:
    """
    Validate the application configuration and return any warnings or errors.

    Returns:
        Dictionary with configuration validation results
    """
    issues = {}

    directory_config = get_api_config("directory")
    if not directory_config["base_url"]:
        issues["directory"] = "No directory API base URL configured"
    elif not directory_config["base_url"].startswith(("http://", "https://")):
        issues["directory"] = "Directory API base URL should start with http:// or https://"

    geocoding_config = get_api_config("geocoding")
    if not geocoding_config["nominatim_user_agent"]:
        issues["geocoding"] = "Nominatim requires a user agent; location lookups will fail"

    app_config = get_app_config()
    if app_config["environment"] not in VALID_ENVIRONMENTS:
        issues["app"] = f"Unknown environment: {app_config['environment']}"
    elif app_config["default_view"] not in VALID_VIEW_MODES:
        issues["app"] = f"Unknown default view: {app_config['default_view']}"

    return issues


if __name__ == "__main__":
    print("Provider Directory - Configuration Status")
    print("=" * 50)

    issues = validate_configuration()
    if issues:
        print("⚠️  Configuration Issues Found:")
        for component, issue in issues.items():
            print(f"  - {component}: {issue}")
    else:
        print("✅ Configuration validation passed")

    print("\n📋 API Status:")
    for api in ("directory", "geocoding"):
        status = "✅ Enabled" if is_api_enabled(api) else "❌ Disabled/Not configured"
        print(f"  - {api}: {status}")

    print(f"\n🔧 Environment: {get_app_config()['environment']}")
