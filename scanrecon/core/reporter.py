#!/usr/bin/env python3
"""
ScanRecon - Report writers
Copyright (C) 2026  Dorin Badea
GPLv3 License

JSON and HTML renderings of one or more ScanReports.
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from scanrecon.core.models import ScanReport
from scanrecon.utils.constants import SCHEMA_VERSION, SECURE_FILE_MODE, VERSION

logger = logging.getLogger("ScanRecon")


def get_template_env() -> Environment:
    """Get Jinja2 environment configured for ScanRecon templates."""
    return Environment(
        loader=PackageLoader("scanrecon", "templates"),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )


def build_results(
    reports: Iterable[ScanReport],
    errors: Optional[Dict[str, str]] = None,
    *,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the serializable results document."""
    report_list: List[ScanReport] = list(reports)
    return {
        "schema_version": SCHEMA_VERSION,
        "version": VERSION,
        "generated_at": (generated_at or datetime.now()).isoformat(timespec="seconds"),
        "summary": {
            "targets": len(report_list) + len(errors or {}),
            "failed_targets": len(errors or {}),
            "services": sum(len(r.services) for r in report_list),
        },
        "reports": [r.to_dict() for r in report_list],
        "errors": dict(errors or {}),
    }


def report_to_json(results: Dict[str, Any]) -> str:
    return json.dumps(results, indent=2, ensure_ascii=False)


def render_html_report(results: Dict[str, Any]) -> str:
    template = get_template_env().get_template("report.html.j2")
    return template.render(results=results)


def _write_secure(output_path: str, content: str) -> str:
    directory = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(directory, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(content)
    os.chmod(output_path, SECURE_FILE_MODE)
    return output_path


def save_json_report(results: Dict[str, Any], output_path: str) -> str:
    """
    Write the JSON report with owner-only permissions.

    Returns:
        Path to saved file
    """
    path = _write_secure(output_path, report_to_json(results) + "\n")
    logger.info("JSON report written to %s", path)
    return path


def save_html_report(results: Dict[str, Any], output_path: str) -> str:
    """
    Write the HTML report with owner-only permissions.

    Returns:
        Path to saved file
    """
    path = _write_secure(output_path, render_html_report(results))
    logger.info("HTML report written to %s", path)
    return path
