from __future__ import annotations

from ..lib.env import module_environment
from ..lib.modules import ModuleScheduler
from ..pipeline import SetupContext


class RunModulesStep:
    step_id = "50_run_modules"

    def run(self, ctx: SetupContext) -> None:
        profile = ctx.require_profile()
        env = module_environment(ctx.config.paths, debug=ctx.debug, profile=profile)
        scheduler = ModuleScheduler(
            ctx.config.modules_dir,
            ctx.runner,
            env=env,
            timeout_s=ctx.config.module_timeout_s,
        )
        report = scheduler.run(profile)
        ctx.module_report = report

        # The scheduler already logged these.
        ctx.warnings.extend(f"Module script not found: {m}" for m in report.missing)
        ctx.warnings.extend(f"Module failed: {m}" for m in report.failed)
