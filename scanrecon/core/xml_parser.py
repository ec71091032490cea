#!/usr/bin/env python3
"""
ScanRecon - Nmap XML report parser

Converts the document written by `nmap -oX` into a RawScanResult. Every port
is kept with its exact state; filtering to open ports happens later, in the
reconciler.
"""

from __future__ import annotations

import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Union

from scanrecon.core.errors import ParseError
from scanrecon.core.models import PortEntry, RawOutputHandle, RawScanResult, ScannedHost
from scanrecon.utils.constants import BANNER_SCRIPT_ID, MAX_PORT, MIN_PORT

ParseSource = Union[RawOutputHandle, Path, str, bytes]

# Preferred <address> types, most useful first
_ADDRESS_PRIORITY = ("ipv4", "ipv6", "mac")
_PORTID_RE = re.compile(r"[0-9]+")


def parse(source: ParseSource) -> RawScanResult:
    """
    Parse nmap XML from a RawOutputHandle, a file path or an XML string/bytes.

    Raises:
        ParseError: the document is missing, not XML or not an nmap report.
    """
    if isinstance(source, RawOutputHandle):
        return parse_file(source.path)
    if isinstance(source, Path):
        return parse_file(source)
    return parse_xml(source)


def parse_file(path: Union[str, os.PathLike]) -> RawScanResult:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ParseError(f"Cannot read nmap output {path}: {exc}") from exc
    return parse_xml(data)


def parse_xml(document: Union[str, bytes]) -> RawScanResult:
    if not document or not document.strip():
        raise ParseError("Empty nmap output")
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise ParseError(f"Invalid nmap XML: {exc}") from exc
    if root.tag != "nmaprun":
        raise ParseError(f"Unexpected root element <{root.tag}>, expected <nmaprun>")

    hosts = tuple(_parse_host(el) for el in root.findall("host"))
    return RawScanResult(
        hosts=hosts,
        scanner=root.get("scanner", "nmap"),
        args=root.get("args", ""),
        version=root.get("version", ""),
    )


def _parse_host(host_el: ET.Element) -> ScannedHost:
    address, addrtype = _pick_address(host_el)
    if not address:
        raise ParseError("<host> without an <address>")

    hostname = ""
    name_el = host_el.find("hostnames/hostname")
    if name_el is not None:
        hostname = name_el.get("name", "")

    status_el = host_el.find("status")
    status = status_el.get("state", "") if status_el is not None else ""

    ports: List[PortEntry] = []
    for port_el in host_el.findall("ports/port"):
        ports.append(_parse_port(port_el, address))

    return ScannedHost(
        address=address,
        addrtype=addrtype,
        hostname=hostname,
        status=status,
        ports=tuple(ports),
    )


def _pick_address(host_el: ET.Element) -> tuple[str, str]:
    candidates = {}
    for addr_el in host_el.findall("address"):
        addrtype = addr_el.get("addrtype", "ipv4")
        candidates.setdefault(addrtype, addr_el.get("addr", ""))
    for addrtype in _ADDRESS_PRIORITY:
        if candidates.get(addrtype):
            return candidates[addrtype], addrtype
    for addrtype, addr in candidates.items():
        if addr:
            return addr, addrtype
    return "", ""


def _parse_port(port_el: ET.Element, address: str) -> PortEntry:
    portid = port_el.get("portid", "")
    if not _PORTID_RE.fullmatch(portid) or not MIN_PORT <= int(portid) <= MAX_PORT:
        raise ParseError(f"Invalid portid {portid!r} for host {address}")

    state_el = port_el.find("state")
    if state_el is None or not state_el.get("state"):
        raise ParseError(f"Port {portid} of host {address} has no state")

    service_name = product = version = extrainfo = ""
    service_el = port_el.find("service")
    if service_el is not None:
        service_name = service_el.get("name", "")
        product = service_el.get("product", "")
        version = service_el.get("version", "")
        extrainfo = service_el.get("extrainfo", "")

    return PortEntry(
        port=int(portid),
        protocol=port_el.get("protocol", "tcp"),
        state=state_el.get("state", ""),
        service_name=service_name,
        banner=_banner(port_el),
        product=product,
        version=version,
        extrainfo=extrainfo,
    )


def _banner(port_el: ET.Element) -> str:
    for script_el in port_el.findall("script"):
        if script_el.get("id") == BANNER_SCRIPT_ID:
            return script_el.get("output", "")
    return ""
