from __future__ import annotations

import glob
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .command import DEFAULT_TIMEOUT_S, CommandRunner
from .profiles import Profile

logger = logging.getLogger(__name__)

LOWEST_PRIORITY = 999
SCRIPT_SUFFIX = ".sh"

_PRIORITY_RE = re.compile(r"^(\d+)")
_PREFIXED_RE = re.compile(r"^\d+-(.+)")


def module_priority(module_id: str) -> int:
    m = _PRIORITY_RE.match(module_id or "")
    return int(m.group(1)) if m else LOWEST_PRIORITY


def module_name(module_id: str) -> str:
    m = _PREFIXED_RE.match(module_id or "")
    return m.group(1) if m else (module_id or "")


@dataclass(frozen=True)
class Module:
    id: str
    script_path: Path
    priority: int
    name: str

    @classmethod
    def from_script(cls, module_id: str, script_path: Path) -> "Module":
        return cls(
            id=module_id,
            script_path=script_path,
            priority=module_priority(module_id),
            name=module_name(module_id),
        )


@dataclass
class ModuleRunReport:
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.failed or self.missing)


class ModuleScheduler:
    """Discover, order and run module scripts, one at a time.

    A requested id resolves to `<id>.sh`, or (for ids without a numeric prefix)
    the alphabetically-first `*-<id>.sh`, whose stem becomes the effective id.
    Modules run in ascending priority, ties in declaration order. A broken or
    missing module is reported and the rest still run.
    """

    def __init__(
        self,
        modules_dir: str | Path,
        runner: CommandRunner,
        *,
        env: Optional[Mapping[str, str]] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.modules_dir = Path(modules_dir)
        self.runner = runner
        self.env = dict(env or {})
        self.timeout_s = timeout_s

    def find_module(self, module_id: str) -> Optional[Module]:
        exact = self.modules_dir / f"{module_id}{SCRIPT_SUFFIX}"
        if exact.is_file():
            return Module.from_script(module_id, exact)

        if _PREFIXED_RE.match(module_id):
            return None

        matches = sorted(
            p for p in self.modules_dir.glob(f"*-{glob.escape(module_id)}{SCRIPT_SUFFIX}") if p.is_file()
        )
        if not matches:
            return None
        return Module.from_script(matches[0].stem, matches[0])

    def resolve(self, requested: Sequence[str], report: Optional[ModuleRunReport] = None) -> List[Module]:
        modules: List[Module] = []
        for module_id in requested:
            module = self.find_module(module_id)
            if module is None:
                logger.warning("Module script not found: %s (searched %s)", module_id, self.modules_dir)
                if report is not None:
                    report.missing.append(module_id)
                continue
            if module.id != module_id:
                logger.debug("Module %s resolved to %s", module_id, module.id)
            modules.append(module)

        # sorted() is stable: equal priorities keep declaration order.
        return sorted(modules, key=lambda m: m.priority)

    def run(self, profile: Profile) -> ModuleRunReport:
        report = ModuleRunReport()
        requested = profile.modules.enabled
        if not requested:
            logger.info("No modules specified")
            return report

        modules = self.resolve(requested, report)
        logger.debug("Modules will be executed in this order: %s", ", ".join(m.id for m in modules))

        for module in modules:
            logger.info("Installing module: %s", module.id)
            if self._execute(module):
                logger.info("Successfully installed module: %s", module.id)
                report.succeeded.append(module.id)
            else:
                report.failed.append(module.id)
        return report

    def _execute(self, module: Module) -> bool:
        out_log = logging.getLogger(f"{__name__}.{module.name}")
        try:
            r = self.runner.run(
                [str(module.script_path.resolve())],
                env=self.env,
                cwd=str(self.modules_dir),
                timeout_s=self.timeout_s,
                on_stdout=out_log.info,
                on_stderr=out_log.warning,
            )
        except Exception:
            logger.exception("Error executing module %s", module.id)
            return False

        if r.timed_out:
            logger.warning("Module %s timed out after %ss", module.id, self.timeout_s)
        elif not r.success:
            logger.warning("Module installation may have issues: %s (exit %s)", module.id, r.returncode)
        return r.success
