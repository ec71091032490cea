#!/usr/bin/env python3
"""
ScanRecon - Tests for the command-line interface.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from scanrecon import cli
from scanrecon.core.errors import ConfigurationError, ExecutionError, ParseError, ScanTimeoutError
from scanrecon.utils.config import get_persistent_defaults, update_persistent_defaults
from scanrecon.utils.constants import (
    EXIT_CONFIG_ERROR,
    EXIT_EXECUTION_ERROR,
    EXIT_OK,
    EXIT_PARSE_ERROR,
    EXIT_TIMEOUT,
)


@pytest.fixture(autouse=True)
def _no_log_files():
    with patch("scanrecon.cli.setup_logging", return_value=MagicMock()) as mock_setup:
        yield mock_setup


def _arg_after(args, flag):
    return args[args.index(flag) + 1]


def test_parse_arguments_defaults():
    args = cli.parse_arguments(["--target", "127.0.0.1"])
    assert args.target == "127.0.0.1"
    assert args.ports is None
    assert args.root_paths is None
    assert args.dry_run is False
    assert args.keep_xml is False


def test_parse_arguments_requires_target():
    with pytest.raises(SystemExit):
        cli.parse_arguments([])


@pytest.mark.parametrize("argv", [["-t", "x", "--timeout", "0"], ["-t", "x", "--threads", "99"]])
def test_parse_arguments_rejects_bad_values(argv):
    with pytest.raises(SystemExit):
        cli.parse_arguments(argv)


@pytest.mark.parametrize(
    "exc,code",
    [
        (ConfigurationError("bad"), EXIT_CONFIG_ERROR),
        (ScanTimeoutError("slow"), EXIT_TIMEOUT),
        (ParseError("junk"), EXIT_PARSE_ERROR),
        (ExecutionError("gone"), EXIT_EXECUTION_ERROR),
    ],
)
def test_exit_code_for(exc, code):
    assert cli.exit_code_for(exc) == code


def test_main_scans_and_writes_reports(tmp_path, fake_nmap, nmap_xml, capsys):
    fake = fake_nmap(xml=nmap_xml("localhostHttp.xml"))
    json_out = tmp_path / "report.json"
    html_out = tmp_path / "report.html"
    rc = cli.main(
        [
            "-t", "127.0.0.1",
            "-p", "80",
            "--root-paths", "/root1,/root2",
            "--json", str(json_out),
            "--html", str(html_out),
        ]
    )
    assert rc == EXIT_OK
    assert _arg_after(fake.calls[0], "-p") == "80"

    data = json.loads(json_out.read_text(encoding="utf-8"))
    services = data["reports"][0]["services"]
    assert [s["application_root"] for s in services] == ["/root1", "/root2"]
    assert data["summary"]["failed_targets"] == 0
    assert "/root2" in html_out.read_text(encoding="utf-8")
    assert "JSON report" in capsys.readouterr().out


def test_main_uses_persisted_port_targets(fake_nmap, nmap_xml):
    update_persistent_defaults(port_targets="80,8080,15000-16000")
    fake = fake_nmap(xml=nmap_xml("localhostHttp.xml"))
    assert cli.main(["-t", "127.0.0.1"]) == EXIT_OK
    assert _arg_after(fake.calls[0], "-p") == "80,8080,15000-16000"


def test_main_override_replaces_persisted_ports(fake_nmap, nmap_xml):
    update_persistent_defaults(port_targets="80,8080,15000-16000")
    fake = fake_nmap(xml=nmap_xml("localhostHttp.xml"))
    assert cli.main(["-t", "127.0.0.1", "--ports", "80,10000-11000"]) == EXIT_OK
    assert _arg_after(fake.calls[0], "-p") == "80,10000-11000"


def test_main_save_defaults(fake_nmap, nmap_xml):
    fake_nmap(xml=nmap_xml("localhostSsh.xml"))
    assert cli.main(["-t", "127.0.0.1", "-p", "22", "--root-paths", "/app", "--save-defaults"]) == EXIT_OK
    defaults = get_persistent_defaults()
    assert defaults["port_targets"] == "22"
    assert defaults["root_paths"] == ["/app"]


def test_main_bad_port_spec_is_config_error(fake_nmap, capsys):
    fake = fake_nmap(xml="<nmaprun/>")
    assert cli.main(["-t", "127.0.0.1", "-p", "80,8080,abcd"]) == EXIT_CONFIG_ERROR
    assert fake.calls == []
    assert "abcd" in capsys.readouterr().out


def test_main_invalid_target(fake_nmap):
    fake = fake_nmap(xml="<nmaprun/>")
    assert cli.main(["-t", "not a host"]) == EXIT_CONFIG_ERROR
    assert fake.calls == []


def test_main_timeout_exit_code(fake_nmap):
    fake_nmap(timeout=True)
    assert cli.main(["-t", "127.0.0.1", "--timeout", "1"]) == EXIT_TIMEOUT


def test_main_missing_nmap_exit_code(fake_nmap):
    fake_nmap(error=FileNotFoundError("nmap"))
    assert cli.main(["-t", "127.0.0.1", "--nmap-path", "/nope/nmap"]) == EXIT_EXECUTION_ERROR


def test_main_corrupt_output_exit_code(fake_nmap, nmap_xml):
    fake_nmap(xml=nmap_xml("malformed.xml"))
    assert cli.main(["-t", "127.0.0.1"]) == EXIT_PARSE_ERROR


def test_main_reports_failed_target_alongside_success(tmp_path, monkeypatch, nmap_xml):
    from pathlib import Path

    def fake_run(args, **kwargs):
        if args[-1] == "127.0.0.1":
            Path(args[args.index("-oX") + 1]).write_text(nmap_xml("localhostSsh.xml"), encoding="utf-8")
        completed = MagicMock()
        completed.returncode = 0 if args[-1] == "127.0.0.1" else 1
        completed.stdout = ""
        completed.stderr = ""
        return completed

    monkeypatch.setattr("scanrecon.core.command_runner.subprocess.run", fake_run)
    json_out = tmp_path / "r.json"
    rc = cli.main(["-t", "127.0.0.1,10.255.255.1", "--json", str(json_out)])
    assert rc == EXIT_EXECUTION_ERROR
    data = json.loads(json_out.read_text(encoding="utf-8"))
    assert data["summary"] == {"targets": 2, "failed_targets": 1, "services": 1}
    assert "10.255.255.1" in data["errors"]


def test_main_dry_run_prints_command(fake_nmap, capsys):
    fake = fake_nmap(xml="<nmaprun/>")
    assert cli.main(["-t", "127.0.0.1", "-p", "22", "--dry-run"]) == EXIT_OK
    assert fake.calls == []
    out = capsys.readouterr().out
    assert "[dry-run]" in out
    assert "-p 22" in out
