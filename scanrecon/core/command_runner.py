#!/usr/bin/env python3
"""
ScanRecon - Centralized Command Runner

Single entry point for external command execution. Commands are always run
without a shell; a timeout kills the child before control returns.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from scanrecon.utils.constants import (
    RC_LAUNCH_FAILED,
    RC_NOT_FOUND,
    RC_PERMISSION_DENIED,
    RC_TIMEOUT,
)


@dataclass(frozen=True)
class CommandResult:
    args: List[str]
    returncode: int
    stdout: Optional[str | bytes]
    stderr: Optional[str | bytes]
    duration_s: float
    timed_out: bool
    launched: bool = True

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner:
    def __init__(
        self,
        *,
        logger: Any = None,
        dry_run: bool = False,
        default_timeout: Optional[float] = 60.0,
        redact_env_keys: Optional[Iterable[str]] = None,
        command_wrapper: Optional[Callable[[Sequence[str]], Sequence[str]]] = None,
    ):
        self._logger = logger
        self._dry_run = bool(dry_run)
        self._default_timeout = default_timeout
        self._redact_env_keys: Set[str] = {k for k in (redact_env_keys or []) if isinstance(k, str)}
        self._command_wrapper = command_wrapper

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        capture_output: bool = True,
        text: bool = True,
    ) -> CommandResult:
        cmd = self._validate_args(args)
        cmd = self._apply_command_wrapper(cmd)
        merged_env = self._merge_env(env)
        redact_values = self._collect_redact_values(merged_env)

        if self._dry_run:
            formatted = self._format_cmd(cmd, redact_values)
            self._log("INFO", f"[dry-run] {formatted}")
            print(f"[dry-run] {formatted}", flush=True)
            empty_out: str | bytes | None
            if not capture_output:
                empty_out = None
            else:
                empty_out = "" if text else b""
            return CommandResult(
                args=list(cmd),
                returncode=0,
                stdout=empty_out,
                stderr=empty_out,
                duration_s=0.0,
                timed_out=False,
                launched=False,
            )

        timeout_val = timeout if timeout is not None else self._default_timeout
        start = time.monotonic()
        self._log("DEBUG", f"exec: {self._format_cmd(cmd, redact_values)}")
        try:
            completed = subprocess.run(
                list(cmd),
                cwd=cwd,
                env=merged_env,
                timeout=timeout_val,
                capture_output=capture_output,
                text=text,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            # subprocess.run() has already killed and reaped the child here.
            self._log("WARNING", f"timeout after {timeout_val}s: {self._format_cmd(cmd, redact_values)}")
            return CommandResult(
                args=list(cmd),
                returncode=RC_TIMEOUT,
                stdout=self._redact_output(getattr(exc, "stdout", None), redact_values),
                stderr=self._redact_output(getattr(exc, "stderr", None), redact_values),
                duration_s=time.monotonic() - start,
                timed_out=True,
            )
        except FileNotFoundError as exc:
            self._log("FAIL", f"command not found: {self._format_cmd(cmd, redact_values)}")
            return CommandResult(
                args=list(cmd),
                returncode=RC_NOT_FOUND,
                stdout=None,
                stderr=str(exc),
                duration_s=time.monotonic() - start,
                timed_out=False,
                launched=False,
            )
        except PermissionError as exc:
            self._log("FAIL", f"permission denied: {self._format_cmd(cmd, redact_values)}")
            return CommandResult(
                args=list(cmd),
                returncode=RC_PERMISSION_DENIED,
                stdout=None,
                stderr=str(exc),
                duration_s=time.monotonic() - start,
                timed_out=False,
                launched=False,
            )
        except OSError as exc:
            self._log("FAIL", f"launch failed ({exc}): {self._format_cmd(cmd, redact_values)}")
            return CommandResult(
                args=list(cmd),
                returncode=RC_LAUNCH_FAILED,
                stdout=None,
                stderr=str(exc),
                duration_s=time.monotonic() - start,
                timed_out=False,
                launched=False,
            )

        return CommandResult(
            args=list(cmd),
            returncode=int(completed.returncode),
            stdout=self._redact_output(completed.stdout if capture_output else None, redact_values),
            stderr=self._redact_output(completed.stderr if capture_output else None, redact_values),
            duration_s=time.monotonic() - start,
            timed_out=False,
        )

    def format_command(self, args: Sequence[str]) -> str:
        return self._format_cmd(self._validate_args(args), self._collect_redact_values(os.environ))

    def _validate_args(self, args: Sequence[str]) -> Tuple[str, ...]:
        if isinstance(args, (str, bytes)):
            raise TypeError("CommandRunner expects args as a list/tuple of strings (shell=False)")
        cmd: List[str] = []
        for a in args:
            if not isinstance(a, str):
                cmd.append(str(a))
            else:
                cmd.append(a)
        if not cmd or not cmd[0].strip():
            raise ValueError("Empty command")
        return tuple(cmd)

    def _apply_command_wrapper(self, cmd: Tuple[str, ...]) -> Tuple[str, ...]:
        wrapper = self._command_wrapper
        if not wrapper:
            return cmd
        try:
            wrapped = wrapper(list(cmd))
        except Exception as exc:
            self._log("WARNING", f"command_wrapper failed: {exc}")
            return cmd
        try:
            return self._validate_args(wrapped)
        except (TypeError, ValueError) as exc:
            self._log("WARNING", f"command_wrapper returned invalid args: {exc}")
            return cmd

    def _merge_env(self, env: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged = os.environ.copy()
        if env:
            for k, v in env.items():
                if isinstance(k, str) and isinstance(v, str):
                    merged[k] = v
        return merged

    def _collect_redact_values(self, env: Mapping[str, str]) -> Set[str]:
        values: Set[str] = set()
        for k in self._redact_env_keys:
            v = env.get(k)
            if isinstance(v, str) and v:
                values.add(v)
        return values

    def _format_cmd(self, args: Sequence[str], redact_values: Set[str]) -> str:
        rendered = " ".join(shlex.quote(a) for a in args)
        return self._redact_text(rendered, redact_values) or rendered

    def _redact_output(self, value: Any, redact_values: Set[str]) -> Any:
        if isinstance(value, str):
            return self._redact_text(value, redact_values)
        return value

    def _redact_text(self, text: Optional[str], redact_values: Set[str]) -> Optional[str]:
        if not isinstance(text, str) or not text:
            return text
        redacted = text
        for val in redact_values:
            redacted = redacted.replace(val, "***")
        return redacted

    def _log(self, level: str, message: str) -> None:
        if not self._logger:
            return
        if level == "DEBUG":
            self._logger.debug(message)
        elif level in {"WARNING", "WARN"}:
            self._logger.warning(message)
        elif level == "FAIL":
            self._logger.error(message)
        else:
            self._logger.info(message)
