from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .config import RunConfig
from .lib.backends import PlatformNotSupportedError
from .lib.command import CommandRunner
from .lib.modules import ModuleRunReport
from .lib.osdetect import OSDetector, OSInfo
from .lib.profiles import Profile

logger = logging.getLogger(__name__)


@dataclass
class SetupContext:
    """Everything one setup run shares between its steps."""

    profile_name: str
    config: RunConfig
    runner: CommandRunner
    detector: OSDetector
    debug: bool = False

    os_info: Optional[OSInfo] = None
    profile: Optional[Profile] = None
    module_report: Optional[ModuleRunReport] = None
    platform_error: Optional[PlatformNotSupportedError] = None
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)

    def require_profile(self) -> Profile:
        if self.profile is None:
            raise RuntimeError("profile not loaded (20_load_profile must run first)")
        return self.profile

    def require_os_info(self) -> OSInfo:
        if self.os_info is None:
            raise RuntimeError("OS not detected (10_detect_os must run first)")
        return self.os_info


class Step(Protocol):
    """A single phase of a setup run."""

    step_id: str

    def run(self, ctx: SetupContext) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    warnings: List[str]
    platform_error: Optional[PlatformNotSupportedError]


def run_pipeline(*, ctx: SetupContext, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order. Steps contain their own non-fatal failures."""

    ran: List[str] = []
    for step in steps:
        logger.info("== %s ==", step.step_id)
        step.run(ctx)
        ran.append(step.step_id)

    return PipelineResult(ran_steps=ran, warnings=list(ctx.warnings), platform_error=ctx.platform_error)
