#!/usr/bin/env python3
"""
ScanRecon - CommandRunner Tests
"""

import subprocess
import unittest
from unittest.mock import MagicMock, patch

from scanrecon.core.command_runner import CommandRunner
from scanrecon.utils.constants import (
    RC_LAUNCH_FAILED,
    RC_NOT_FOUND,
    RC_PERMISSION_DENIED,
    RC_TIMEOUT,
)


class _Logger:
    def __init__(self):
        self.messages = []

    def debug(self, msg):
        self.messages.append(("debug", msg))

    def info(self, msg):
        self.messages.append(("info", msg))

    def warning(self, msg):
        self.messages.append(("warning", msg))

    def error(self, msg):
        self.messages.append(("error", msg))


def _completed(returncode=0, stdout="", stderr=""):
    completed = MagicMock()
    completed.returncode = returncode
    completed.stdout = stdout
    completed.stderr = stderr
    return completed


class TestCommandRunner(unittest.TestCase):
    def test_rejects_string_args(self):
        runner = CommandRunner()
        with self.assertRaises(TypeError):
            runner.run("nmap -p 22 127.0.0.1")  # type: ignore[arg-type]

    def test_rejects_empty_command(self):
        runner = CommandRunner()
        with self.assertRaises(ValueError):
            runner.run([])

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_runs_without_shell(self, mock_run):
        mock_run.return_value = _completed(stdout="ok")
        res = CommandRunner().run(["nmap", "-p", 22, "127.0.0.1"], timeout=5)
        self.assertTrue(res.ok)
        self.assertTrue(res.launched)
        self.assertEqual(res.args, ["nmap", "-p", "22", "127.0.0.1"])
        _, kwargs = mock_run.call_args
        self.assertNotIn("shell", kwargs)
        self.assertEqual(kwargs["timeout"], 5)
        self.assertFalse(kwargs["check"])

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_default_timeout_is_used(self, mock_run):
        mock_run.return_value = _completed()
        CommandRunner(default_timeout=12.5).run(["nmap"])
        self.assertEqual(mock_run.call_args[1]["timeout"], 12.5)

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_dry_run_does_not_execute(self, mock_run):
        logger = _Logger()
        runner = CommandRunner(logger=logger, dry_run=True)
        with patch("builtins.print") as mock_print:
            res = runner.run(["nmap", "-oX", "out.xml", "127.0.0.1"])
        self.assertTrue(res.ok)
        self.assertFalse(res.launched)
        mock_run.assert_not_called()
        mock_print.assert_called_once()
        self.assertIn("[dry-run] nmap -oX out.xml 127.0.0.1", mock_print.call_args[0][0])
        self.assertTrue(any("dry-run" in m[1] for m in logger.messages if m[0] == "info"))

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_timeout_is_reported_not_retried(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["nmap"], timeout=1)
        logger = _Logger()
        res = CommandRunner(logger=logger).run(["nmap"], timeout=1)
        self.assertTrue(res.timed_out)
        self.assertFalse(res.ok)
        self.assertEqual(res.returncode, RC_TIMEOUT)
        self.assertEqual(mock_run.call_count, 1)
        self.assertTrue(any(m[0] == "warning" for m in logger.messages))

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError("nmap")
        res = CommandRunner().run(["nmap"])
        self.assertEqual(res.returncode, RC_NOT_FOUND)
        self.assertFalse(res.launched)
        self.assertFalse(res.timed_out)

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_permission_denied(self, mock_run):
        mock_run.side_effect = PermissionError("denied")
        res = CommandRunner().run(["/opt/nmap"])
        self.assertEqual(res.returncode, RC_PERMISSION_DENIED)
        self.assertFalse(res.launched)

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_other_launch_errors_are_reported(self, mock_run):
        mock_run.side_effect = OSError(8, "Exec format error")
        logger = _Logger()
        res = CommandRunner(logger=logger).run(["/opt/nmap"])
        self.assertEqual(res.returncode, RC_LAUNCH_FAILED)
        self.assertFalse(res.launched)
        self.assertFalse(res.timed_out)
        self.assertIn("Exec format error", res.stderr)
        self.assertTrue(any(m[0] == "error" for m in logger.messages))

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_nonzero_exit_is_returned(self, mock_run):
        mock_run.return_value = _completed(returncode=1, stderr="Failed to resolve")
        res = CommandRunner().run(["nmap", "nohost.invalid"])
        self.assertFalse(res.ok)
        self.assertTrue(res.launched)
        self.assertEqual(res.returncode, 1)
        self.assertEqual(res.stderr, "Failed to resolve")

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_redacts_env_values_in_output(self, mock_run):
        mock_run.return_value = _completed(stdout="token=SECRET123")
        runner = CommandRunner(redact_env_keys={"TEST_SECRET"})
        res = runner.run(["echo", "token=SECRET123"], env={"TEST_SECRET": "SECRET123"})
        self.assertIn("***", res.stdout)
        self.assertNotIn("SECRET123", res.stdout)

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_command_wrapper_is_applied(self, mock_run):
        mock_run.return_value = _completed()
        runner = CommandRunner(command_wrapper=lambda cmd: ["sudo", "-n"] + cmd)
        res = runner.run(["nmap", "-sS"])
        self.assertEqual(res.args, ["sudo", "-n", "nmap", "-sS"])

    @patch("scanrecon.core.command_runner.subprocess.run")
    def test_broken_command_wrapper_falls_back(self, mock_run):
        mock_run.return_value = _completed()
        logger = _Logger()
        runner = CommandRunner(logger=logger, command_wrapper=lambda cmd: "not a list")
        res = runner.run(["nmap"])
        self.assertEqual(res.args, ["nmap"])
        self.assertTrue(any(m[0] == "warning" for m in logger.messages))

    def test_format_command_quotes_arguments(self):
        runner = CommandRunner()
        self.assertEqual(
            runner.format_command(["nmap", "--script", "banner", "my host"]),
            "nmap --script banner 'my host'",
        )


if __name__ == "__main__":
    unittest.main()
