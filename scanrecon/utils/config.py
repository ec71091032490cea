#!/usr/bin/env python3
"""
ScanRecon - Configuration Management Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Persistent configuration: base port targets, root paths and scan defaults.
"""

import copy
import json
import logging
import os
import stat
from typing import Any, Dict

# Config version
CONFIG_VERSION = "1.1.0"

# Environment variable names
ENV_CONFIG_FILE = "SCANRECON_CONFIG"
ENV_PORT_TARGETS = "SCANRECON_PORT_TARGETS"

# Default config structure
DEFAULT_CONFIG: Dict[str, Any] = {
    "version": CONFIG_VERSION,
    "defaults": {
        "port_targets": None,  # str, nmap -p syntax (e.g. "22,80,8000-8100")
        "root_paths": None,  # list[str] of application roots (e.g. ["/", "/app"])
        "nmap_path": None,
        "timeout_s": None,  # float seconds per nmap invocation
        "threads": None,
        "output_dir": None,  # where nmap XML is captured; system temp dir if None
        "timing_template": None,  # 0-5
    },
}

logger = logging.getLogger("ScanRecon")


def get_config_paths() -> tuple[str, str]:
    """
    Get the config directory and file path.

    - SCANRECON_CONFIG points directly at a config file when set
    - Otherwise ~/.scanrecon/config.json
    """
    override = os.environ.get(ENV_CONFIG_FILE, "").strip()
    if override:
        config_file = os.path.abspath(os.path.expanduser(override))
        return os.path.dirname(config_file), config_file

    home_dir = os.path.expanduser("~")
    config_dir = os.path.join(home_dir, ".scanrecon")
    config_file = os.path.join(config_dir, "config.json")
    return config_dir, config_file


def ensure_config_dir() -> str:
    """
    Create config directory if it doesn't exist.

    Returns:
        Path to config directory
    """
    config_dir, _ = get_config_paths()
    if not os.path.isdir(config_dir):
        os.makedirs(config_dir, mode=0o700, exist_ok=True)
    return config_dir


def load_config() -> Dict[str, Any]:
    """
    Load configuration from file.

    Returns:
        Configuration dictionary (defaults if file doesn't exist)
    """
    _, config_file = get_config_paths()
    if not os.path.isfile(config_file):
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (json.JSONDecodeError, OSError):
        logger.debug("Failed to load config file; using defaults", exc_info=True)
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(config, dict):
        logger.debug("Config file is not a JSON object; using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    # Merge with defaults for any missing keys
    merged = copy.deepcopy(DEFAULT_CONFIG)
    merged.update(config)
    return merged


def save_config(config: Dict[str, Any]) -> bool:
    """
    Save configuration to file with secure permissions.

    Args:
        config: Configuration dictionary to save

    Returns:
        True if save succeeded
    """
    try:
        ensure_config_dir()
    except OSError:
        logger.debug("Failed to create config dir", exc_info=True)
        return False
    _, config_file = get_config_paths()

    # Ensure version is current
    config["version"] = CONFIG_VERSION

    try:
        # Write to temp file first then rename (atomic)
        temp_file = config_file + ".tmp"
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)

        # Set secure permissions (owner read/write only)
        os.chmod(temp_file, stat.S_IRUSR | stat.S_IWUSR)

        os.replace(temp_file, config_file)
        return True

    except OSError:
        logger.debug("Failed to save config file", exc_info=True)
        return False


def get_persistent_defaults() -> Dict[str, Any]:
    """
    Get persisted defaults from config file.

    SCANRECON_PORT_TARGETS, when set, stands in for the persisted port_targets.

    Returns:
        Dict with default keys; values may be None if not configured.
    """
    config = load_config()
    raw = config.get("defaults")
    defaults = DEFAULT_CONFIG.get("defaults", {}).copy()
    if isinstance(raw, dict):
        defaults.update(raw)

    env_ports = os.environ.get(ENV_PORT_TARGETS)
    if env_ports is not None and env_ports.strip():
        defaults["port_targets"] = env_ports.strip()

    root_paths = defaults.get("root_paths")
    if isinstance(root_paths, str):
        defaults["root_paths"] = [p.strip() for p in root_paths.split(",") if p.strip()]
    elif root_paths is not None and not isinstance(root_paths, list):
        defaults["root_paths"] = None

    return defaults


def update_persistent_defaults(**kwargs: Any) -> bool:
    """
    Update persisted defaults in config file.

    Any keys not present in DEFAULT_CONFIG["defaults"] are ignored.

    Returns:
        True if save succeeded
    """
    config = load_config()
    existing = config.get("defaults")
    defaults = existing if isinstance(existing, dict) else {}

    allowed = set(DEFAULT_CONFIG.get("defaults", {}).keys())
    for key, value in kwargs.items():
        if key in allowed:
            defaults[key] = value

    config["defaults"] = defaults
    return save_config(config)

