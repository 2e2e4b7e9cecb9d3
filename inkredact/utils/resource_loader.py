"""
Per-user directories for settings and saved redaction data.
"""
import os
import sys
from pathlib import Path

APP_NAME = "InkRedact"


def _override(env_var: str) -> Path:
    path = Path(os.environ[env_var]).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_app_data_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the application data directory for storing user data.

    ``INKREDACT_DATA_DIR`` takes precedence over the platform default.

    Args:
        app_name: Name of the application

    Returns:
        Path to the app data directory
    """
    if os.environ.get("INKREDACT_DATA_DIR"):
        return _override("INKREDACT_DATA_DIR")

    if os.name == 'nt':  # Windows
        base_dir = os.environ.get('APPDATA', os.path.expanduser('~'))
    elif sys.platform == 'darwin':  # macOS
        base_dir = os.path.expanduser('~/Library/Application Support')
    else:  # Linux and others
        base_dir = os.environ.get('XDG_DATA_HOME') or os.path.expanduser('~/.local/share')

    app_dir = Path(base_dir) / app_name
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_config_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the configuration directory for storing settings.

    ``INKREDACT_CONFIG_DIR`` takes precedence over the platform default.

    Args:
        app_name: Name of the application

    Returns:
        Path to the config directory
    """
    if os.environ.get("INKREDACT_CONFIG_DIR"):
        return _override("INKREDACT_CONFIG_DIR")

    if os.name == 'nt':  # Windows
        config_dir = get_app_data_dir(app_name) / "config"
    elif sys.platform == 'darwin':  # macOS
        config_dir = Path.home() / "Library" / "Preferences" / app_name
    else:  # Linux
        config_dir = Path(os.environ.get('XDG_CONFIG_HOME') or Path.home() / ".config") / app_name

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
