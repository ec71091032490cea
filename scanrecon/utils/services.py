#!/usr/bin/env python3
"""
ScanRecon - Service classification helpers
"""

from typing import Optional

from scanrecon.utils.constants import NON_WEB_SERVICES, WEB_SERVICES_EXACT, WEB_SERVICES_KEYWORDS


def is_web_service(name: Optional[str]) -> bool:
    """Check if an nmap service name denotes an HTTP(S) service."""
    if not name:
        return False
    service = name.strip().lower()
    if service in NON_WEB_SERVICES:
        return False
    if service in WEB_SERVICES_EXACT:
        return True
    # ssl/http-alt, http-rpc-epmap style names
    base = service.split("/", 1)[-1]
    if base in WEB_SERVICES_EXACT:
        return True
    if base.startswith("http-rpc"):
        return False
    return any(base.startswith(kw) for kw in WEB_SERVICES_KEYWORDS)
