"""Configuration utilities for chunes.

Handles XDG-compliant config paths, the track store location, snapshot
export settings and WebDAV credentials.
"""

import json
import os
from pathlib import Path
from typing import Optional

from chunes.utils.constants import DEFAULT_SNAPSHOT_PREFIX


def get_or_create_config_dir() -> Path:
    """Get or create the config directory using XDG paths."""
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    else:
        base = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))
    config_dir = base / 'chunes'
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_or_create_tracks_file_path() -> Path:
    """Get path to the tracks CSV store (CHUNES_TRACKS_FILE overrides)."""
    override = os.environ.get("CHUNES_TRACKS_FILE")
    if override:
        return Path(override)
    return get_or_create_config_dir() / 'tracks.csv'


def get_or_create_snapshot_dir() -> Path:
    """Get or create the local directory snapshots are written to."""
    snapshot_dir = get_or_create_config_dir() / 'snapshots'
    snapshot_dir.mkdir(parents=True, exist_ok=True)
    return snapshot_dir


def get_or_create_temp_dir() -> Path:
    """Get or create the temp directory for WebDAV downloads."""
    temp_dir = get_or_create_config_dir() / 'temp'
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def get_config_file() -> Path:
    """Get path to the chunes config file."""
    return get_or_create_config_dir() / "config.json"


def load_config() -> dict:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        with open(config_file, "r") as f:
            return json.load(f)
    return {}


def save_config(config: dict) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    with open(config_file, "w") as f:
        json.dump(config, f, indent=2)


def get_webdav_credentials() -> tuple[Optional[str], Optional[str]]:
    """Get WebDAV credentials from config or environment.

    Returns:
        Tuple of (username, password), either may be None.
    """
    # Environment variables take precedence
    username = os.environ.get("WEBDAV_USERNAME")
    password = os.environ.get("WEBDAV_PASSWORD")

    if username and password:
        return username, password

    # Fall back to config file
    config = load_config()
    webdav_config = config.get("webdav", {})
    return (
        username or webdav_config.get("username"),
        password or webdav_config.get("password"),
    )


def set_webdav_credentials(username: Optional[str], password: Optional[str]) -> None:
    """Save WebDAV credentials to config file."""
    config = load_config()
    config.setdefault("webdav", {})
    config["webdav"]["username"] = username
    config["webdav"]["password"] = password
    save_config(config)


def get_export_settings() -> tuple[str, Optional[str]]:
    """Get the snapshot prefix and public base URL for exports.

    Environment variables (CHUNES_EXPORT_PREFIX, CHUNES_PUBLIC_URL) take
    precedence over the "export" section of the config file.

    Returns:
        Tuple of (prefix, public_base_url). The prefix always ends in "/"
        unless it is empty; the URL may be None.
    """
    export_config = load_config().get("export", {})
    prefix = os.environ.get("CHUNES_EXPORT_PREFIX")
    if prefix is None:
        prefix = export_config.get("prefix", DEFAULT_SNAPSHOT_PREFIX)
    public_url = os.environ.get("CHUNES_PUBLIC_URL") or export_config.get("public_url")

    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix, public_url
