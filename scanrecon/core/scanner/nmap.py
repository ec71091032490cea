#!/usr/bin/env python3
"""
ScanRecon - Nmap invocation

Builds the nmap command line for one target, runs it through CommandRunner on
an injected executor and hands back the location of the XML it wrote.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import List, Optional

from scanrecon.core.command_runner import CommandRunner
from scanrecon.core.errors import ConfigurationError, ExecutionError, ScanTimeoutError
from scanrecon.core.executors import InlineExecutor
from scanrecon.core.models import PortRange, PortSpec, RawOutputHandle, ScanTarget
from scanrecon.utils.constants import (
    BANNER_SCRIPT_ID,
    DEFAULT_NMAP_PATH,
    DEFAULT_SCAN_TIMEOUT,
    DEFAULT_TIMING_TEMPLATE,
    MAX_PORT,
    MIN_PORT,
    RC_NOT_FOUND,
    RC_PERMISSION_DENIED,
)
from scanrecon.utils.dry_run import is_dry_run

_default_logger = logging.getLogger("ScanRecon")

_SCAN_TECHNIQUES = {
    "connect": "-sT",
    "syn": "-sS",
    "udp": "-sU",
}


def _make_runner(
    *,
    logger=None,
    dry_run: Optional[bool] = None,
    timeout: Optional[float] = None,
) -> CommandRunner:
    return CommandRunner(
        logger=logger,
        dry_run=is_dry_run(dry_run),
        default_timeout=timeout,
    )


def _check_port(port: int) -> int:
    if isinstance(port, bool) or not isinstance(port, int) or not MIN_PORT <= port <= MAX_PORT:
        raise ConfigurationError(f"Invalid port: {port!r}", token=str(port))
    return port


class NmapClient:
    """
    Command builder and runner for a single nmap invocation.

    Configuration methods return the client so calls can be chained.
    """

    def __init__(
        self,
        nmap_path: str,
        output_file: str | os.PathLike,
        *,
        runner: Optional[CommandRunner] = None,
        logger=None,
        dry_run: Optional[bool] = None,
    ):
        self.nmap_path = nmap_path or DEFAULT_NMAP_PATH
        self.output_file = Path(output_file)
        self.logger = logger or _default_logger
        self._runner = runner or _make_runner(logger=self.logger, dry_run=dry_run)
        self._target: Optional[ScanTarget] = None
        self._ports: List[int] = []
        self._ranges: List[PortRange] = []
        self._scripts: List[str] = []
        self._version_detection = False
        self._treat_online = False
        self._timing: Optional[int] = None
        self._host_timeout_s: Optional[int] = None
        self._technique: Optional[str] = None

    def with_target(self, target: ScanTarget) -> "NmapClient":
        self._target = target
        return self

    def on_port(self, port: int) -> "NmapClient":
        self._ports.append(_check_port(port))
        return self

    def on_port_range(self, start: int, end: int) -> "NmapClient":
        _check_port(start)
        _check_port(end)
        if start > end:
            raise ConfigurationError(f"Invalid port range: {start}-{end}", token=f"{start}-{end}")
        self._ranges.append(PortRange(start, end))
        return self

    def with_version_detection(self) -> "NmapClient":
        self._version_detection = True
        return self

    def with_script(self, name: str) -> "NmapClient":
        if name and name not in self._scripts:
            self._scripts.append(name)
        return self

    def treat_all_hosts_as_online(self) -> "NmapClient":
        self._treat_online = True
        return self

    def with_timing_template(self, level: int) -> "NmapClient":
        if not isinstance(level, int) or not 0 <= level <= 5:
            raise ConfigurationError(f"Invalid timing template: {level!r}")
        self._timing = level
        return self

    def with_host_timeout(self, seconds: float) -> "NmapClient":
        self._host_timeout_s = max(1, int(seconds))
        return self

    def with_transport(self, technique: str) -> "NmapClient":
        if technique not in _SCAN_TECHNIQUES:
            raise ConfigurationError(f"Unknown scan technique: {technique!r}")
        self._technique = technique
        return self

    def port_argument(self) -> str:
        """Ports in call order, explicit ports before ranges."""
        tokens = [str(p) for p in self._ports] + [str(r) for r in self._ranges]
        return ",".join(tokens)

    def build_args(self) -> List[str]:
        if self._target is None:
            raise ConfigurationError("No scan target configured")
        args = [self.nmap_path]
        if self._target.is_ipv6:
            args.append("-6")
        if self._technique:
            args.append(_SCAN_TECHNIQUES[self._technique])
        if self._treat_online:
            args.append("-Pn")
        if self._version_detection:
            args.append("-sV")
        if self._scripts:
            args.extend(["--script", ",".join(self._scripts)])
        if self._timing is not None:
            args.append(f"-T{self._timing}")
        if self._host_timeout_s is not None:
            args.extend(["--host-timeout", f"{self._host_timeout_s}s"])
        ports = self.port_argument()
        if ports:
            args.extend(["-p", ports])
        args.extend(["-oX", str(self.output_file), self._target.endpoint])
        return args

    def run(self, executor: Optional[Executor] = None, timeout: float = DEFAULT_SCAN_TIMEOUT) -> Future:
        """Submit the blocking nmap run to `executor`; the Future yields a RawOutputHandle."""
        args = self.build_args()
        return (executor or InlineExecutor()).submit(self._execute, args, timeout)

    def _execute(self, args: List[str], timeout: float) -> RawOutputHandle:
        target = self._target
        res = self._runner.run(args, timeout=float(timeout), capture_output=True, text=True)
        stderr = res.stderr if isinstance(res.stderr, str) else ""

        if self._runner.dry_run:
            raise ExecutionError("dry-run: nmap was not executed", reason="dry_run")
        if res.timed_out:
            self.discard_output()
            raise ScanTimeoutError(
                f"nmap scan of {target} exceeded {timeout}s and was killed", timeout_s=timeout
            )
        if res.returncode == RC_NOT_FOUND and not res.launched:
            raise ExecutionError(
                f"nmap binary not found: {self.nmap_path}",
                reason="nmap_not_available",
                returncode=res.returncode,
                stderr=stderr,
            )
        if res.returncode == RC_PERMISSION_DENIED and not res.launched:
            raise ExecutionError(
                f"permission denied running {self.nmap_path}",
                reason="permission_denied",
                returncode=res.returncode,
                stderr=stderr,
            )
        if not res.launched:
            raise ExecutionError(
                f"could not start {self.nmap_path}: {stderr}",
                reason="launch_failed",
                returncode=res.returncode,
                stderr=stderr,
            )
        if not self._has_output():
            self.discard_output()
            raise ExecutionError(
                f"nmap exited with code {res.returncode} without XML output",
                reason="empty_nmap_output",
                returncode=res.returncode,
                stderr=stderr[:2000],
            )
        if res.returncode != 0:
            # nmap may exit non-zero (e.g. host down) while still writing a valid report
            self.logger.warning(
                "nmap exited with code %s for %s; using captured output", res.returncode, target
            )

        return RawOutputHandle(
            path=self.output_file,
            target=target,
            args=tuple(res.args),
            returncode=res.returncode,
            stderr=stderr[:2000],
            duration_s=round(res.duration_s, 2),
        )

    def _has_output(self) -> bool:
        try:
            return self.output_file.stat().st_size > 0
        except OSError:
            return False

    def discard_output(self) -> None:
        """Remove the capture file, partial or not."""
        try:
            self.output_file.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            self.logger.debug("Failed to remove partial output %s", self.output_file, exc_info=True)


def configure_ports(client: NmapClient, spec: PortSpec) -> NmapClient:
    """Emit one port callback per explicit port, then one range callback per range."""
    for port in sorted(spec.ports):
        client.on_port(port)
    for port_range in sorted(spec.ranges, key=lambda r: (r.start, r.end)):
        client.on_port_range(port_range.start, port_range.end)
    return client


def new_output_file(output_dir: Optional[str] = None) -> Path:
    """
    Reserve a private file for nmap's -oX output.

    Raises:
        ExecutionError: `output_dir` cannot be created or written.
    """
    try:
        if output_dir:
            os.makedirs(output_dir, mode=0o700, exist_ok=True)
        fd, path = tempfile.mkstemp(prefix="scanrecon-", suffix=".xml", dir=output_dir or None)
    except OSError as exc:
        raise ExecutionError(
            f"Cannot create nmap output file in {output_dir or 'the temp dir'}: {exc}",
            reason="output_unavailable",
        ) from exc
    os.close(fd)
    return Path(path)


def build_default_client(
    target: ScanTarget,
    output_file: str | os.PathLike,
    *,
    nmap_path: Optional[str] = None,
    timing_template: Optional[int] = DEFAULT_TIMING_TEMPLATE,
    runner: Optional[CommandRunner] = None,
    logger=None,
    dry_run: Optional[bool] = None,
) -> NmapClient:
    """Service detection with banner capture; every host is assumed to be up."""
    client = (
        NmapClient(
            nmap_path or DEFAULT_NMAP_PATH,
            output_file,
            runner=runner,
            logger=logger,
            dry_run=dry_run,
        )
        .with_target(target)
        .treat_all_hosts_as_online()
        .with_version_detection()
        .with_script(BANNER_SCRIPT_ID)
    )
    if timing_template is not None:
        client.with_timing_template(timing_template)
    return client


def scan(
    target: ScanTarget,
    spec: PortSpec,
    deadline: float = DEFAULT_SCAN_TIMEOUT,
    *,
    executor: Optional[Executor] = None,
    nmap_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    timing_template: Optional[int] = DEFAULT_TIMING_TEMPLATE,
    runner: Optional[CommandRunner] = None,
    logger=None,
    dry_run: Optional[bool] = None,
) -> RawOutputHandle:
    """
    Run nmap against `target` for the ports in `spec`.

    Raises:
        ExecutionError: nmap could not run or left no output.
        ScanTimeoutError: `deadline` seconds elapsed; the process was killed.

    The deadline bounds the nmap process itself and starts when a worker of
    `executor` picks the task up; time spent queued behind other scans on a
    busy pool is not counted.
    """
    output_file = new_output_file(output_dir)
    try:
        client = build_default_client(
            target,
            output_file,
            nmap_path=nmap_path,
            timing_template=timing_template,
            runner=runner,
            logger=logger,
            dry_run=dry_run,
        )
        configure_ports(client, spec)
        return client.run(executor, timeout=deadline).result()
    except BaseException:
        try:
            output_file.unlink()
        except FileNotFoundError:
            pass
        raise


def get_nmap_version(nmap_path: Optional[str] = None, *, runner: Optional[CommandRunner] = None) -> Optional[str]:
    """Return the installed nmap version string, or None when unavailable."""
    runner = runner or _make_runner(dry_run=False, timeout=5.0)
    res = runner.run([nmap_path or DEFAULT_NMAP_PATH, "--version"], timeout=5.0)
    if not res.ok or not isinstance(res.stdout, str):
        return None
    match = re.search(r"Nmap version ([\w.]+)", res.stdout, re.IGNORECASE)
    return match.group(1) if match else None
