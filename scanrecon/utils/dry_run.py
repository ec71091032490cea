#!/usr/bin/env python3
"""
ScanRecon - Dry-run helpers

Centralizes dry-run detection so modules can consistently honor --dry-run
via the SCANRECON_DRY_RUN environment variable and/or explicit parameters.
"""

from __future__ import annotations

import os
from typing import Optional

DRY_RUN_ENV = "SCANRECON_DRY_RUN"


def is_dry_run(dry_run: Optional[bool] = None) -> bool:
    """
    Determine whether dry-run mode is enabled.

    Precedence:
    - Explicit `dry_run` argument (if not None)
    - Environment variable `SCANRECON_DRY_RUN` (truthy tokens)
    """
    if dry_run is not None:
        return bool(dry_run)
    token = os.environ.get(DRY_RUN_ENV, "")
    return token.strip().lower() in {"1", "true", "yes", "y", "on"}
