#!/usr/bin/env python3
"""
ScanRecon - Constants and Configuration
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

# Version
VERSION = "1.2.0"
SCHEMA_VERSION = "1.1"  # Report schema version (may differ from app version)

# Security constants
MAX_INPUT_LENGTH = 1024  # Maximum length for IP/hostname inputs
MAX_PORT_SPEC_LENGTH = 4096  # Maximum length for a port specification string

# Port limits
MIN_PORT = 0
MAX_PORT = 65535

# Port state that makes a port reportable
PORT_STATE_OPEN = "open"

# Scan defaults
DEFAULT_NMAP_PATH = "nmap"
DEFAULT_SCAN_TIMEOUT = 600.0  # Seconds allowed for a single nmap invocation
DEFAULT_TIMING_TEMPLATE = 4  # -T4
DEFAULT_THREADS = 4
MAX_THREADS = 16
MIN_THREADS = 1

# Exit codes used by the CLI
EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_EXECUTION_ERROR = 3
EXIT_TIMEOUT = 4
EXIT_PARSE_ERROR = 5

# CommandRunner return codes for failures that never reached the process
RC_TIMEOUT = 124
RC_PERMISSION_DENIED = 126
RC_NOT_FOUND = 127
RC_LAUNCH_FAILED = 125  # any other OSError raised while starting the process

# Logging
LOGGER_NAME = "ScanRecon"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# File permissions
SECURE_FILE_MODE = 0o600

# Service detection keywords
WEB_SERVICES_KEYWORDS = ["http", "www", "web"]

WEB_SERVICES_EXACT = [
    "http",
    "https",
    "www",
    "http-proxy",
    "ssl/http",
    "ssl/https",
    "http-alt",
    "http-admin",
    "http-connect",
    "http-mgmt",
    "https-alt",
    "radan-http",
]

# nmap reports these for ports it could not fingerprint; never treat as web
NON_WEB_SERVICES = ["tcpwrapped", "unknown", ""]

# NSE script carrying the raw service banner
BANNER_SCRIPT_ID = "banner"
