from __future__ import annotations

import logging
import os
import shlex
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import IO, Callable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

# Safety net, not a real limit.
DEFAULT_TIMEOUT_S = 5 * 60 * 60

DEFAULT_ELEVATION_HELPER = "sudo"

_READER_GRACE_S = 5.0
_MIN_JOIN_S = 0.1

LineSink = Callable[[str], None]


@dataclass(frozen=True)
class CmdResult:
    argv: List[str]
    command: str
    returncode: int
    stdout: str
    stderr: str
    success: bool
    timed_out: bool = False
    error: Optional[BaseException] = None


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def _drain(stream: IO[str], buf: List[str], sink: Optional[LineSink], label: str) -> None:
    for line in stream:
        buf.append(line)
        if sink is None:
            continue
        try:
            sink(line.rstrip("\r\n"))
        except Exception:
            # Keep draining; a stalled pipe would block the child.
            logger.exception("%s sink failed", label)
    stream.close()


def _join_readers(readers: Sequence[threading.Thread], wait_s: float, command: str) -> None:
    end = time.monotonic() + wait_s
    for t in readers:
        t.join(timeout=max(0.0, end - time.monotonic()))
    if any(t.is_alive() for t in readers):
        logger.warning("Output pipes still open after %.1fs, returning partial output: %s", wait_s, command)


class CommandRunner:
    """Run external programs and encode every outcome in a CmdResult.

    - Elevation prepends the helper (sudo) unless argv already starts with it.
    - dry_run renders the command and returns success without spawning.
    - stdout/stderr are drained by one thread each, so a chatty child never
      blocks on a full pipe; optional sinks see each line as it arrives.
    - Output is decoded as UTF-8; undecodable bytes become U+FFFD.
    - Timeouts kill the child and come back as timed_out results.
    - Readers are joined against the same deadline, so a background
      grandchild holding the pipes cannot outlive timeout_s.
    """

    def __init__(self, *, dry_run: bool = False, elevation_helper: str = DEFAULT_ELEVATION_HELPER):
        self.dry_run = dry_run
        self.elevation_helper = elevation_helper

    def build_argv(self, argv: Sequence[str], *, elevate: bool = False) -> List[str]:
        argv_list = [str(a) for a in argv]
        if not argv_list:
            raise ValueError("argv must not be empty")
        if elevate and argv_list[0] != self.elevation_helper:
            argv_list.insert(0, self.elevation_helper)
        return argv_list

    def run(
        self,
        argv: Sequence[str],
        *,
        elevate: bool = False,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
        on_stdout: Optional[LineSink] = None,
        on_stderr: Optional[LineSink] = None,
    ) -> CmdResult:
        argv_list = self.build_argv(argv, elevate=elevate)
        command = _fmt_argv(argv_list)
        logger.debug("Executing command: %s", command)

        if self.dry_run:
            echo = f"[DRY RUN] Would execute: {command}"
            logger.info("%s", echo)
            if on_stdout is not None:
                on_stdout(echo)
            return CmdResult(
                argv=argv_list,
                command=command,
                returncode=0,
                stdout=echo,
                stderr="",
                success=True,
            )

        try:
            p = subprocess.Popen(
                argv_list,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
            )
        except OSError as e:
            logger.error("Command execution failed: %s (%s)", command, e)
            return CmdResult(
                argv=argv_list,
                command=command,
                returncode=-1,
                stdout="",
                stderr=str(e),
                success=False,
                error=e,
            )
        out_buf: List[str] = []
        err_buf: List[str] = []
        readers = [
            threading.Thread(target=_drain, args=(p.stdout, out_buf, on_stdout, "stdout"), daemon=True),
            threading.Thread(target=_drain, args=(p.stderr, err_buf, on_stderr, "stderr"), daemon=True),
        ]
        for t in readers:
            t.start()

        deadline = time.monotonic() + timeout_s
        try:
            returncode = p.wait(timeout=timeout_s)
        except subprocess.TimeoutExpired as e:
            p.kill()
            p.wait()
            _join_readers(readers, _READER_GRACE_S, command)
            logger.warning("Command timed out after %ss: %s", timeout_s, command)
            note = f"Command timed out after {timeout_s}s"
            captured = "".join(err_buf)
            return CmdResult(
                argv=argv_list,
                command=command,
                returncode=-1,
                stdout="".join(out_buf),
                stderr=f"{captured.rstrip()}\n{note}" if captured.strip() else note,
                success=False,
                timed_out=True,
                error=e,
            )

        # Background children of the command may keep the pipes open.
        remaining = deadline - time.monotonic()
        _join_readers(readers, max(_MIN_JOIN_S, min(_READER_GRACE_S, remaining)), command)

        stdout = "".join(out_buf)
        stderr = "".join(err_buf)
        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

        return CmdResult(
            argv=argv_list,
            command=command,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            success=returncode == 0,
        )
