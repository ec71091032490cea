#!/usr/bin/env python3
"""
ScanRecon - Port scanning pipeline

Resolve ports -> run nmap -> parse XML -> reconcile with root paths.
Single targets go through `NmapPortScanner.scan`; `scan_many` fans several
targets out over the shared worker pool and keeps their failures apart.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from scanrecon.core.command_runner import CommandRunner
from scanrecon.core.errors import ExecutionError, ScanReconError
from scanrecon.core.executors import InlineExecutor, clamp_threads
from scanrecon.core.models import PortSpec, RawOutputHandle, ScanReport, ScanTarget
from scanrecon.core.port_targets import resolve
from scanrecon.core.reconciler import ServiceClassifier, reconcile
from scanrecon.core.scanner.nmap import (
    NmapClient,
    build_default_client,
    configure_ports,
    new_output_file,
    scan as run_nmap_scan,
)
from scanrecon.core.xml_parser import parse
from scanrecon.utils.constants import (
    DEFAULT_NMAP_PATH,
    DEFAULT_SCAN_TIMEOUT,
    DEFAULT_THREADS,
    DEFAULT_TIMING_TEMPLATE,
)
from scanrecon.utils.services import is_web_service

_default_logger = logging.getLogger("ScanRecon")


@dataclass(frozen=True)
class PortScannerConfig:
    """Settings for one NmapPortScanner; built from persisted defaults plus CLI overrides."""

    nmap_path: str = DEFAULT_NMAP_PATH
    port_targets: Optional[str] = None
    port_override: Optional[str] = None
    root_paths: Tuple[str, ...] = ()
    timeout_s: float = DEFAULT_SCAN_TIMEOUT
    output_dir: Optional[str] = None
    threads: int = DEFAULT_THREADS
    timing_template: Optional[int] = DEFAULT_TIMING_TEMPLATE
    dry_run: Optional[bool] = None
    keep_output: bool = False

    @classmethod
    def from_config(cls, defaults: Optional[Dict[str, Any]] = None, **overrides: Any) -> "PortScannerConfig":
        """
        Build from a persisted defaults dict.

        Invalid persisted values fall back to built-in defaults; keyword
        overrides set to None are ignored.
        """
        defaults = defaults or {}
        values: Dict[str, Any] = {}

        nmap_path = defaults.get("nmap_path")
        if isinstance(nmap_path, str) and nmap_path.strip():
            values["nmap_path"] = nmap_path.strip()

        port_targets = defaults.get("port_targets")
        if isinstance(port_targets, str):
            values["port_targets"] = port_targets

        root_paths = defaults.get("root_paths")
        if isinstance(root_paths, (list, tuple)):
            values["root_paths"] = tuple(p for p in root_paths if isinstance(p, str) and p)

        timeout_s = defaults.get("timeout_s")
        if isinstance(timeout_s, (int, float)) and not isinstance(timeout_s, bool) and timeout_s > 0:
            values["timeout_s"] = float(timeout_s)

        output_dir = defaults.get("output_dir")
        if isinstance(output_dir, str) and output_dir.strip():
            values["output_dir"] = output_dir.strip()

        threads = defaults.get("threads")
        if isinstance(threads, int) and not isinstance(threads, bool):
            values["threads"] = clamp_threads(threads)

        timing = defaults.get("timing_template")
        if isinstance(timing, int) and not isinstance(timing, bool) and 0 <= timing <= 5:
            values["timing_template"] = timing

        for key, value in overrides.items():
            if value is None:
                continue
            if key == "root_paths":
                value = tuple(value)
            values[key] = value
        return cls(**values)


@dataclass(frozen=True)
class TargetOutcome:
    """Result of scanning one target inside scan_many()."""

    target: ScanTarget
    report: Optional[ScanReport] = None
    error: Optional[ScanReconError] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None


def _as_target(target: Union[str, ScanTarget]) -> ScanTarget:
    if isinstance(target, ScanTarget):
        return target
    return ScanTarget(str(target).strip())


class NmapPortScanner:
    """Port scanner plugin backed by nmap."""

    plugin_id = "nmap_port_scanner"

    def __init__(
        self,
        config: Optional[PortScannerConfig] = None,
        *,
        executor: Optional[Executor] = None,
        classifier: ServiceClassifier = is_web_service,
        runner: Optional[CommandRunner] = None,
        logger=None,
    ):
        self.config = config or PortScannerConfig()
        self.executor = executor or InlineExecutor()
        self.classifier = classifier
        self.runner = runner
        self.logger = logger or _default_logger

    def resolve_ports(self) -> PortSpec:
        return resolve(self.config.port_targets, self.config.port_override)

    def scan(self, target: Union[str, ScanTarget]) -> ScanReport:
        """
        Scan one target and reconcile its open ports.

        Raises:
            ConfigurationError, ExecutionError, ScanTimeoutError, ParseError
        """
        target = _as_target(target)
        spec = self.resolve_ports()
        self.logger.info("Scanning %s ports=[%s]", target, spec.to_string() or "nmap default")
        handle = run_nmap_scan(
            target,
            spec,
            self.config.timeout_s,
            executor=self.executor,
            nmap_path=self.config.nmap_path,
            output_dir=self.config.output_dir,
            timing_template=self.config.timing_template,
            runner=self.runner,
            logger=self.logger,
            dry_run=self.config.dry_run,
        )
        return self._build_report(target, spec, handle)

    def scan_many(self, targets: Iterable[Union[str, ScanTarget]]) -> List[TargetOutcome]:
        """
        Scan several targets concurrently on the executor.

        Outcomes are returned in input order. A failing target only affects
        its own outcome; a bad port specification fails the whole call since
        it applies to every target.
        """
        target_list = [_as_target(t) for t in targets]
        spec = self.resolve_ports()
        outcomes: List[Optional[TargetOutcome]] = [None] * len(target_list)
        pending: Dict[Future, Tuple[int, ScanTarget, NmapClient]] = {}

        for idx, target in enumerate(target_list):
            client = None
            try:
                client = self._build_client(target, spec)
                pending[client.run(self.executor, timeout=self.config.timeout_s)] = (
                    idx,
                    target,
                    client,
                )
            except Exception as exc:
                if client is not None:
                    client.discard_output()
                outcomes[idx] = self._failed(target, exc)

        for fut in as_completed(pending):
            idx, target, client = pending[fut]
            keep = False
            try:
                report = self._build_report(target, spec, fut.result())
            except Exception as exc:
                outcomes[idx] = self._failed(target, exc)
            else:
                outcomes[idx] = TargetOutcome(target=target, report=report)
                keep = self.config.keep_output
            finally:
                if not keep:
                    client.discard_output()

        return [o for o in outcomes if o is not None]

    def _build_client(self, target: ScanTarget, spec: PortSpec) -> NmapClient:
        output_file = new_output_file(self.config.output_dir)
        try:
            client = build_default_client(
                target,
                output_file,
                nmap_path=self.config.nmap_path,
                timing_template=self.config.timing_template,
                runner=self.runner,
                logger=self.logger,
                dry_run=self.config.dry_run,
            )
            return configure_ports(client, spec)
        except ScanReconError:
            output_file.unlink(missing_ok=True)
            raise

    def _build_report(self, target: ScanTarget, spec: PortSpec, handle: RawOutputHandle) -> ScanReport:
        try:
            result = parse(handle)
        finally:
            if not self.config.keep_output:
                handle.discard()
        report = reconcile(
            result,
            self.config.root_paths,
            self.classifier,
            target=target,
            port_spec=spec,
        )
        self.logger.info(
            "%s: %d service record(s) from %d host(s)", target, len(report.services), len(result.hosts)
        )
        return report

    def _failed(self, target: ScanTarget, exc: Exception) -> TargetOutcome:
        if not isinstance(exc, ScanReconError):
            self.logger.debug("Worker exception details for %s", target, exc_info=exc)
            wrapped = ExecutionError(f"{type(exc).__name__}: {exc}", reason="unexpected_error")
            wrapped.__cause__ = exc
            exc = wrapped
        self.logger.warning("Scan of %s failed: %s", target, exc)
        return TargetOutcome(target=target, error=exc)
