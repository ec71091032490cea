#!/usr/bin/env python3
"""
ScanRecon - Entry point for `python -m scanrecon`
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import sys

from scanrecon.cli import main

if __name__ == "__main__":
    sys.exit(main())
