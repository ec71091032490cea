#!/usr/bin/env python3
"""ScanRecon core subpackage."""

from scanrecon.core.port_scanner import NmapPortScanner, PortScannerConfig, TargetOutcome

__all__ = ["NmapPortScanner", "PortScannerConfig", "TargetOutcome"]
