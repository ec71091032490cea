#!/usr/bin/env python3
"""
ScanRecon - Report reconciliation

Turns parsed per-port facts plus user supplied application roots into the
final ordered list of ServiceRecords.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from scanrecon.core.models import (
    PortEntry,
    PortSpec,
    RawScanResult,
    ScannedHost,
    ScanReport,
    ScanTarget,
    ServiceRecord,
)
from scanrecon.utils.services import is_web_service

ServiceClassifier = Callable[[str], bool]


def _baseline_record(host: ScannedHost, entry: PortEntry) -> ServiceRecord:
    return ServiceRecord(
        endpoint=host.address,
        port=entry.port,
        protocol=entry.protocol,
        service_name=entry.service_name,
        banner=entry.banner,
    )


def expand_service(
    host: ScannedHost,
    entry: PortEntry,
    path_hints: Sequence[str],
    classifier: ServiceClassifier = is_web_service,
) -> List[ServiceRecord]:
    """
    Records for one open port.

    Web services fan out into one record per path hint, in hint order.
    Anything else, or an empty hint list, yields the single baseline record.
    """
    baseline = _baseline_record(host, entry)
    if not path_hints or not classifier(entry.service_name):
        return [baseline]
    return [
        ServiceRecord(
            endpoint=baseline.endpoint,
            port=baseline.port,
            protocol=baseline.protocol,
            service_name=baseline.service_name,
            banner=baseline.banner,
            application_root=hint,
        )
        for hint in path_hints
    ]


def reconcile(
    result: RawScanResult,
    path_hints: Optional[Sequence[str]] = None,
    classifier: ServiceClassifier = is_web_service,
    *,
    target: Optional[ScanTarget] = None,
    port_spec: Optional[PortSpec] = None,
) -> ScanReport:
    """Build the ScanReport in host-then-port discovery order, open ports only."""
    hints = list(path_hints or [])
    services: List[ServiceRecord] = []
    for host in result.hosts:
        for entry in host.open_ports():
            services.extend(expand_service(host, entry, hints, classifier))

    if target is None:
        target = ScanTarget(result.hosts[0].address if result.hosts else "")
    return ScanReport(target=target, services=tuple(services), port_spec=port_spec)
