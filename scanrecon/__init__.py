#!/usr/bin/env python3
"""
ScanRecon - nmap port scan reconciliation
Copyright (C) 2026  Dorin Badea

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

ScanRecon package initialization.
"""

from scanrecon.core.errors import (
    ConfigurationError,
    ExecutionError,
    ParseError,
    ScanReconError,
    ScanTimeoutError,
)
from scanrecon.core.models import PortSpec, ScanReport, ScanTarget, ServiceRecord
from scanrecon.core.port_scanner import NmapPortScanner, PortScannerConfig
from scanrecon.core.port_targets import resolve
from scanrecon.core.reconciler import reconcile
from scanrecon.core.scanner.nmap import scan
from scanrecon.core.xml_parser import parse
from scanrecon.utils.constants import VERSION

__all__ = [
    "ConfigurationError",
    "ExecutionError",
    "NmapPortScanner",
    "ParseError",
    "PortScannerConfig",
    "PortSpec",
    "ScanReconError",
    "ScanReport",
    "ScanTarget",
    "ScanTimeoutError",
    "ServiceRecord",
    "VERSION",
    "__version__",
    "parse",
    "reconcile",
    "resolve",
    "scan",
]
__version__ = VERSION
