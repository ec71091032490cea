#!/usr/bin/env python3
"""
Scanner Module - ScanRecon
nmap command building and invocation.
"""

from scanrecon.core.scanner.nmap import (
    NmapClient,
    build_default_client,
    configure_ports,
    get_nmap_version,
    new_output_file,
    scan,
)

__all__ = [
    "NmapClient",
    "build_default_client",
    "configure_ports",
    "get_nmap_version",
    "new_output_file",
    "scan",
]
