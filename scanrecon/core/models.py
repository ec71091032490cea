"""
ScanRecon - Core Data Models
Copyright (C) 2026 Dorin Badea
GPLv3 License

This module defines the canonical data structures used throughout the application.
Every model is a frozen dataclass: stages hand values to each other and never
mutate what they received.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from scanrecon.utils.constants import PORT_STATE_OPEN


@dataclass(frozen=True)
class ScanTarget:
    """A network endpoint (IP address or hostname) to be scanned."""

    endpoint: str

    @property
    def is_ipv6(self) -> bool:
        try:
            return ipaddress.ip_address(self.endpoint).version == 6
        except ValueError:
            return False

    def __str__(self) -> str:
        return self.endpoint


@dataclass(frozen=True, order=True)
class PortRange:
    """Inclusive port range."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class PortSpec:
    """Explicit ports plus inclusive ranges, both kept sorted and unique."""

    ports: Tuple[int, ...] = ()
    ranges: Tuple[PortRange, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ports", tuple(sorted(set(self.ports))))
        object.__setattr__(self, "ranges", tuple(sorted(set(self.ranges))))

    @property
    def is_empty(self) -> bool:
        return not self.ports and not self.ranges

    def to_string(self) -> str:
        """Render as nmap -p syntax: explicit ports ascending, then ranges."""
        tokens = [str(p) for p in self.ports] + [str(r) for r in self.ranges]
        return ",".join(tokens)

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class PortEntry:
    """Represents one <port> element of an nmap report."""

    port: int
    protocol: str = "tcp"
    state: str = ""
    service_name: str = ""
    banner: str = ""
    product: str = ""
    version: str = ""
    extrainfo: str = ""

    @property
    def is_open(self) -> bool:
        return self.state == PORT_STATE_OPEN


@dataclass(frozen=True)
class ScannedHost:
    """Represents one <host> element of an nmap report."""

    address: str
    addrtype: str = "ipv4"
    hostname: str = ""
    status: str = ""
    ports: Tuple[PortEntry, ...] = ()

    def open_ports(self) -> List[PortEntry]:
        return [p for p in self.ports if p.is_open]


@dataclass(frozen=True)
class RawScanResult:
    """Parsed representation of one nmap run."""

    hosts: Tuple[ScannedHost, ...] = ()
    scanner: str = "nmap"
    args: str = ""
    version: str = ""


@dataclass(frozen=True)
class RawOutputHandle:
    """Location of the XML captured by one nmap invocation."""

    path: Path
    target: ScanTarget
    args: Tuple[str, ...] = ()
    returncode: int = 0
    stderr: str = ""
    duration_s: float = 0.0

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8", errors="replace")

    def discard(self) -> None:
        """Remove the captured file; it is a transient artifact."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


@dataclass(frozen=True)
class ServiceRecord:
    """Reconciled output unit: one service, optionally bound to an application root."""

    endpoint: str
    port: int
    protocol: str
    service_name: str = ""
    banner: str = ""
    application_root: str = ""

    def to_dict(self) -> Dict:
        """Serialize for JSON reports compatibility."""
        return {
            "endpoint": self.endpoint,
            "port": self.port,
            "protocol": self.protocol,
            "service_name": self.service_name,
            "banner": self.banner,
            "application_root": self.application_root,
        }


@dataclass(frozen=True)
class ScanReport:
    """Target info plus the ordered service records found on it."""

    target: ScanTarget
    services: Tuple[ServiceRecord, ...] = field(default_factory=tuple)
    port_spec: Optional[PortSpec] = None

    @property
    def is_empty(self) -> bool:
        return not self.services

    def to_dict(self) -> Dict:
        """Serialize for JSON reports compatibility."""
        return {
            "target": self.target.endpoint,
            "port_spec": self.port_spec.to_string() if self.port_spec else "",
            "services": [s.to_dict() for s in self.services],
        }
