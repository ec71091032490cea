#!/usr/bin/env python3
"""
ScanRecon - Target validation helpers

Splits user supplied target tokens into IP addresses, hostnames and rejects.
"""

from __future__ import annotations

import ipaddress
import re
from typing import List, Tuple

from scanrecon.utils.constants import MAX_INPUT_LENGTH

_HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def is_valid_hostname(value: str) -> bool:
    host = value.rstrip(".")
    if not host or len(host) > 253:
        return False
    # A numeric TLD means a mistyped IPv4 address
    if host.split(".")[-1].isdigit():
        return False
    return all(_HOSTNAME_LABEL.match(label) for label in host.split("."))


def parse_target_tokens(tokens: List[str], max_len: int = MAX_INPUT_LENGTH) -> Tuple[List[str], List[str]]:
    """Split raw target tokens into valid endpoints (IP or hostname) and rejects."""
    valid: List[str] = []
    invalid: List[str] = []

    for token in tokens:
        raw = token.strip()
        if not raw:
            continue
        if len(raw) > max_len:
            invalid.append(raw)
            continue
        try:
            valid.append(str(ipaddress.ip_address(raw.strip("[]"))))
            continue
        except ValueError:
            pass
        if is_valid_hostname(raw):
            valid.append(raw.lower())
        else:
            invalid.append(raw)

    seen = set()
    deduped: List[str] = []
    for entry in valid:
        if entry in seen:
            continue
        seen.add(entry)
        deduped.append(entry)

    return deduped, invalid
