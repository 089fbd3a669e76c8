"""Application directories for the FTP client engine."""

import os
import sys
from pathlib import Path


# Application name for config directories
APP_NAME = "ftpclient"


def get_app_data_dir() -> Path:
    """
    Get the application data directory (created if missing).

    Platform-specific locations:
        - Windows: %APPDATA%/ftpclient
        - Linux: $XDG_CONFIG_HOME/ftpclient or ~/.config/ftpclient
        - macOS: ~/Library/Application Support/ftpclient

    Returns:
        Path to the application data directory
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

    app_dir = base / APP_NAME
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path() -> Path:
    """
    Get the settings file location.

    Returns:
        Path to settings.json inside the application data directory
    """
    return get_app_data_dir() / "settings.json"
