#!/usr/bin/env python3
"""ScanRecon utilities subpackage."""

from scanrecon.utils.constants import (
    VERSION,
    MAX_INPUT_LENGTH,
    MAX_PORT_SPEC_LENGTH,
    DEFAULT_SCAN_TIMEOUT,
)

__all__ = ["VERSION", "MAX_INPUT_LENGTH", "MAX_PORT_SPEC_LENGTH", "DEFAULT_SCAN_TIMEOUT"]
