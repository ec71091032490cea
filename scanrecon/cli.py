#!/usr/bin/env python3
"""
ScanRecon - CLI Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Command-line interface and argument parsing.
"""

import argparse
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scanrecon.core.errors import (
    ConfigurationError,
    ParseError,
    ScanReconError,
    ScanTimeoutError,
)
from scanrecon.core.executors import make_scan_pool
from scanrecon.core.port_scanner import PortScannerConfig, TargetOutcome
from scanrecon.core.registry import default_registry
from scanrecon.core.reporter import build_results, save_html_report, save_json_report
from scanrecon.utils.config import get_persistent_defaults, update_persistent_defaults
from scanrecon.utils.constants import (
    EXIT_CONFIG_ERROR,
    EXIT_EXECUTION_ERROR,
    EXIT_OK,
    EXIT_PARSE_ERROR,
    EXIT_TIMEOUT,
    MAX_THREADS,
    MIN_THREADS,
    VERSION,
)
from scanrecon.utils.log import setup_logging
from scanrecon.utils.targets import parse_target_tokens


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="scanrecon",
        description=f"ScanRecon v{VERSION} - nmap port scan reconciliation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan nmap's default ports
  scanrecon --target 192.168.1.10

  # Override the configured ports and expand web services per application root
  scanrecon -t 10.0.0.5 --ports 80,8080,8000-8100 --root-paths /,/app --json out.json
""",
    )
    parser.add_argument(
        "--target",
        "-t",
        type=str,
        metavar="HOST",
        help="Target IP(s) or hostname(s), comma-separated",
    )
    parser.add_argument(
        "--ports",
        "-p",
        type=str,
        metavar="SPEC",
        help="Port specification overriding the configured port_targets (e.g. 22,80,8000-8100)",
    )
    parser.add_argument(
        "--root-paths",
        type=str,
        metavar="PATHS",
        help="Comma-separated application roots applied to web services",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Deadline for each nmap invocation",
    )
    parser.add_argument(
        "--threads",
        "-j",
        type=int,
        choices=range(MIN_THREADS, MAX_THREADS + 1),
        metavar=f"{MIN_THREADS}-{MAX_THREADS}",
        help="Concurrent nmap processes",
    )
    parser.add_argument("--nmap-path", type=str, metavar="PATH", help="nmap executable")
    parser.add_argument("--json", dest="json_output", metavar="FILE", help="Write JSON report")
    parser.add_argument("--html", dest="html_output", metavar="FILE", help="Write HTML report")
    parser.add_argument(
        "--keep-xml", action="store_true", help="Keep captured nmap XML files after parsing"
    )
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Persist --ports and --root-paths as the new configured defaults",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Print the nmap commands without running them"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose console logging")
    parser.add_argument("--version", action="version", version=f"ScanRecon v{VERSION}")

    args = parser.parse_args(argv)
    if not args.target:
        parser.error("--target is required")
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive")
    return args


def exit_code_for(exc: BaseException) -> int:
    if isinstance(exc, ConfigurationError):
        return EXIT_CONFIG_ERROR
    if isinstance(exc, ScanTimeoutError):
        return EXIT_TIMEOUT
    if isinstance(exc, ParseError):
        return EXIT_PARSE_ERROR
    return EXIT_EXECUTION_ERROR


def render_outcomes(console: Console, outcomes: List[TargetOutcome]) -> None:
    for outcome in outcomes:
        if getattr(outcome.error, "reason", "") == "dry_run":
            console.print(f"[cyan][DRY-RUN][/cyan] {outcome.target}: nmap not executed")
            continue
        if not outcome.ok:
            console.print(f"[bold red][FAIL][/bold red] {outcome.target}: {escape(str(outcome.error))}")
            continue
        report = outcome.report
        if report.is_empty:
            console.print(f"[yellow][INFO][/yellow] {outcome.target}: no open ports")
            continue
        table = Table(title=str(outcome.target))
        table.add_column("Port", justify="right")
        table.add_column("Proto")
        table.add_column("Service")
        table.add_column("App root")
        table.add_column("Banner", overflow="fold")
        for svc in report.services:
            table.add_row(
                str(svc.port),
                svc.protocol,
                svc.service_name or "-",
                svc.application_root or "-",
                svc.banner,
            )
        console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    console = Console()
    logger = setup_logging(verbose=args.verbose)

    targets, invalid = parse_target_tokens(args.target.split(","))
    if invalid:
        console.print(f"[bold red]Invalid target(s):[/bold red] {escape(', '.join(invalid))}")
        return EXIT_CONFIG_ERROR
    if not targets:
        console.print("[bold red]No valid targets[/bold red]")
        return EXIT_CONFIG_ERROR

    root_paths = _split_csv(args.root_paths)
    config = PortScannerConfig.from_config(
        get_persistent_defaults(),
        port_override=args.ports,
        root_paths=root_paths,
        timeout_s=args.timeout,
        threads=args.threads,
        nmap_path=args.nmap_path,
        dry_run=True if args.dry_run else None,
        keep_output=args.keep_xml or None,
    )

    pool = make_scan_pool(config.threads)
    try:
        scanner = default_registry().create(
            "nmap_port_scanner", config=config, executor=pool, logger=logger
        )
        outcomes = scanner.scan_many(targets)
    except ScanReconError as exc:
        console.print(f"[bold red][FAIL][/bold red] {escape(str(exc))}")
        return exit_code_for(exc)
    finally:
        pool.shutdown(wait=True)

    if args.save_defaults:
        update_persistent_defaults(
            port_targets=args.ports if args.ports else config.port_targets,
            root_paths=list(config.root_paths) or None,
        )

    render_outcomes(console, outcomes)

    errors: Dict[str, str] = {str(o.target): str(o.error) for o in outcomes if not o.ok}
    results = build_results([o.report for o in outcomes if o.ok], errors)
    if args.json_output:
        save_json_report(results, args.json_output)
        console.print(f"[green][OK][/green] JSON report: {args.json_output}")
    if args.html_output:
        save_html_report(results, args.html_output)
        console.print(f"[green][OK][/green] HTML report: {args.html_output}")

    for outcome in outcomes:
        if outcome.ok or getattr(outcome.error, "reason", "") == "dry_run":
            continue
        return exit_code_for(outcome.error)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
