"""
Centralized pytest fixtures for the ScanRecon test suite.

Scans never touch a real nmap binary here: `fake_nmap` stands in for
subprocess.run and writes a canned XML report to the path following -oX.
"""

import logging
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from scanrecon.core.executors import InlineExecutor

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def output_path_from(args) -> Path:
    """Return the file nmap was told to write with -oX."""
    args = list(args)
    return Path(args[args.index("-oX") + 1])


class FakeNmap:
    """
    subprocess.run replacement.

    Each call records its argv. `xml` is written to the -oX path unless it is
    None; `timeout` raises TimeoutExpired after writing a partial report.
    """

    def __init__(self, xml=None, returncode=0, stderr="", timeout=False, error=None):
        self.xml = xml
        self.returncode = returncode
        self.stderr = stderr
        self.timeout = timeout
        self.error = error
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        if self.error is not None:
            raise self.error
        out = output_path_from(args)
        if self.timeout:
            out.write_text("<?xml version=\"1.0\"?><nmaprun><host>", encoding="utf-8")
            raise subprocess.TimeoutExpired(cmd=args, timeout=kwargs.get("timeout"))
        if self.xml is not None:
            out.write_text(self.xml, encoding="utf-8")
        completed = MagicMock()
        completed.returncode = self.returncode
        completed.stdout = ""
        completed.stderr = self.stderr
        return completed


@pytest.fixture
def inline_executor():
    executor = InlineExecutor()
    yield executor
    executor.shutdown()


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def fake_nmap(monkeypatch):
    """Factory installing a FakeNmap as subprocess.run for CommandRunner."""

    def _install(**kwargs):
        fake = FakeNmap(**kwargs)
        monkeypatch.setattr("scanrecon.core.command_runner.subprocess.run", fake)
        return fake

    return _install


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the user's config and any dry-run setting."""
    monkeypatch.setenv("SCANRECON_CONFIG", str(tmp_path / "config" / "config.json"))
    monkeypatch.delenv("SCANRECON_PORT_TARGETS", raising=False)
    monkeypatch.delenv("SCANRECON_DRY_RUN", raising=False)


@pytest.fixture
def nmap_xml():
    """Loader for the canned nmap reports under tests/fixtures."""

    def _load(name):
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR
