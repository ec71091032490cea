#!/usr/bin/env python3
"""
ScanRecon - Port Target Resolver

Turns the persisted port_targets setting and the optional --ports override
into a validated PortSpec.
"""

from __future__ import annotations

import re
from typing import List, Optional

from scanrecon.core.errors import ConfigurationError
from scanrecon.core.models import PortRange, PortSpec
from scanrecon.utils.constants import MAX_PORT, MAX_PORT_SPEC_LENGTH, MIN_PORT

_NUMBER_RE = re.compile(r"^\d+$")


def _parse_port(value: str, token: str) -> int:
    value = value.strip()
    if not _NUMBER_RE.match(value):
        raise ConfigurationError(f"Invalid port number: {token!r}", token=token)
    port = int(value)
    if port < MIN_PORT or port > MAX_PORT:
        raise ConfigurationError(
            f"Port out of range ({MIN_PORT}-{MAX_PORT}): {token!r}", token=token
        )
    return port


def parse_port_spec(text: Optional[str]) -> PortSpec:
    """
    Parse a port specification string.

    Supports:
    - Single ports: "80"
    - Ranges: "15000-16000"
    - Comma-separated mixes: "22,80,8000-8100"

    Raises:
        ConfigurationError: on any token that is not a port or a valid range.
    """
    if text is None:
        return PortSpec()
    text = text.strip()
    if not text:
        return PortSpec()
    if len(text) > MAX_PORT_SPEC_LENGTH:
        raise ConfigurationError("Port specification too long")

    ports: List[int] = []
    ranges: List[PortRange] = []
    for part in text.split(","):
        token = part.strip()
        if not token:
            continue
        if "-" in token:
            start_s, _, end_s = token.partition("-")
            if not start_s.strip() or not end_s.strip():
                raise ConfigurationError(f"Malformed port range: {token!r}", token=token)
            start = _parse_port(start_s, token)
            end = _parse_port(end_s, token)
            if start > end:
                raise ConfigurationError(
                    f"Port range start exceeds end: {token!r}", token=token
                )
            ranges.append(PortRange(start, end))
        else:
            ports.append(_parse_port(token, token))

    return PortSpec(ports=tuple(ports), ranges=tuple(ranges))


def format_port_spec(spec: PortSpec) -> str:
    return spec.to_string()


def resolve(base: Optional[str], override: Optional[str] = None) -> PortSpec:
    """
    Resolve the effective PortSpec.

    A present, non-blank override replaces the base entirely; the two are
    never merged. The base is not parsed at all in that case, so a broken
    persisted value cannot block an explicit override.
    """
    if override is not None and override.strip():
        return parse_port_spec(override)
    return parse_port_spec(base)
