from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest
import yaml

from adytum.lib.command import CmdResult


class FakeRunner:
    """Records invocations instead of spawning processes."""

    def __init__(self, fail: Optional[Callable[[List[str]], bool]] = None) -> None:
        self.dry_run = False
        self.fail = fail or (lambda argv: False)
        self.calls: List[Dict[str, Any]] = []

    @property
    def argvs(self) -> List[List[str]]:
        return [c["argv"] for c in self.calls]

    def run(self, argv: Sequence[str], *, elevate: bool = False, **kwargs: Any) -> CmdResult:
        argv_list = [str(a) for a in argv]
        self.calls.append({"argv": argv_list, "elevate": elevate, **kwargs})
        failed = self.fail(argv_list)
        return CmdResult(
            argv=argv_list,
            command=" ".join(argv_list),
            returncode=1 if failed else 0,
            stdout="",
            stderr="boom" if failed else "",
            success=not failed,
        )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def conf_dir(tmp_path: Path) -> Path:
    root = tmp_path / "conf"
    (root / "profiles.d").mkdir(parents=True)
    (root / "modules.d").mkdir(parents=True)
    return root


def write_profile(conf_dir: Path, name: str, doc: Dict[str, Any]) -> Path:
    p = conf_dir / "profiles.d" / f"{name}.yaml"
    p.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
    return p


def write_module(conf_dir: Path, filename: str, body: str = "exit 0\n") -> Path:
    p = conf_dir / "modules.d" / filename
    p.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    p.chmod(0o755)
    return p
