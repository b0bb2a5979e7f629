from __future__ import annotations

import sys
import time
from pathlib import Path

from adytum.lib.command import CommandRunner

PY = sys.executable


def test_dry_run_spawns_nothing(tmp_path: Path) -> None:
    marker = tmp_path / "touched"
    runner = CommandRunner(dry_run=True)

    r = runner.run([PY, "-c", f"open({str(marker)!r}, 'w').close()"])

    assert r.success is True
    assert r.returncode == 0
    assert not marker.exists()


def test_dry_run_echoes_rendered_command() -> None:
    seen: list[str] = []
    r = CommandRunner(dry_run=True).run(["dnf", "install", "-y", "foo"], on_stdout=seen.append)

    assert r.command == "dnf install -y foo"
    assert "dnf install -y foo" in r.stdout
    assert seen == [r.stdout]


def test_elevation_prepends_helper_once() -> None:
    runner = CommandRunner(dry_run=True)

    assert runner.build_argv(["dnf", "install"], elevate=True) == ["sudo", "dnf", "install"]
    assert runner.build_argv(["sudo", "dnf"], elevate=True) == ["sudo", "dnf"]
    assert runner.build_argv(["dnf"], elevate=False) == ["dnf"]

    r = runner.run(["rpm", "--import", "https://example.invalid/key"], elevate=True)
    assert r.argv[0] == "sudo"
    assert r.command.startswith("sudo rpm --import")


def test_custom_elevation_helper() -> None:
    runner = CommandRunner(dry_run=True, elevation_helper="doas")
    assert runner.build_argv(["dnf"], elevate=True) == ["doas", "dnf"]


def test_captures_output_and_exit_code() -> None:
    code = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"
    r = CommandRunner().run([PY, "-c", code])

    assert r.returncode == 3
    assert r.success is False
    assert r.timed_out is False
    assert r.stdout == "out\n"
    assert r.stderr == "err\n"


def test_streams_lines_in_order() -> None:
    code = "import sys\nfor i in range(50):\n    print(i)\n    print('e%d' % i, file=sys.stderr)\n"
    out: list[str] = []
    err: list[str] = []

    r = CommandRunner().run([PY, "-c", code], on_stdout=out.append, on_stderr=err.append)

    assert r.success
    assert out == [str(i) for i in range(50)]
    assert err == ["e%d" % i for i in range(50)]
    # Buffers are filled regardless of sinks.
    assert r.stdout.splitlines() == out


def test_large_output_does_not_deadlock() -> None:
    code = "import sys; sys.stdout.write('x' * 500000); sys.stderr.write('y' * 500000)"
    r = CommandRunner().run([PY, "-c", code], timeout_s=30)

    assert r.success
    assert len(r.stdout) == 500000
    assert len(r.stderr) == 500000


def test_failing_sink_does_not_stop_draining() -> None:
    def sink(line: str) -> None:
        raise RuntimeError("sink broke")

    r = CommandRunner().run([PY, "-c", "print('a'); print('b')"], on_stdout=sink)

    assert r.success
    assert r.stdout == "a\nb\n"


def test_timeout_returns_result() -> None:
    r = CommandRunner().run([PY, "-c", "import time; time.sleep(30)"], timeout_s=0.5)

    assert r.success is False
    assert r.timed_out is True
    assert r.returncode == -1
    assert "timed out" in r.stderr


def test_timeout_keeps_captured_stderr() -> None:
    code = "import sys, time; print('last words', file=sys.stderr, flush=True); time.sleep(30)"
    r = CommandRunner().run([PY, "-c", code], timeout_s=1)

    assert r.timed_out is True
    assert r.stderr.startswith("last words\n")
    assert r.stderr.endswith("Command timed out after 1s")


def test_undecodable_output_is_replaced() -> None:
    code = "import sys; sys.stdout.buffer.write(b'\\xff\\n' + b'x' * 300000)"
    r = CommandRunner().run([PY, "-c", code], timeout_s=30)

    assert r.success is True
    assert r.timed_out is False
    assert r.stdout.startswith("\ufffd\n")
    assert r.stdout.count("x") == 300000


def test_background_child_holding_pipes_does_not_block() -> None:
    start = time.monotonic()
    r = CommandRunner().run(["sh", "-c", "sleep 20 & echo started"], timeout_s=2)
    elapsed = time.monotonic() - start

    assert elapsed < 10
    assert r.success is True
    assert r.stdout == "started\n"


def test_missing_binary_is_captured() -> None:
    r = CommandRunner().run(["definitely-not-a-real-binary-adytum"])

    assert r.success is False
    assert r.returncode == -1
    assert isinstance(r.error, FileNotFoundError)


def test_env_is_overlaid_on_host_environment() -> None:
    code = "import os; print(os.environ['ADYTUM_TEST']); print('PATH' in os.environ)"
    r = CommandRunner().run([PY, "-c", code], env={"ADYTUM_TEST": "yes"})

    assert r.stdout.splitlines() == ["yes", "True"]

