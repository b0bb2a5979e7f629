from __future__ import annotations

from ..lib.profiles import ProfileResolver
from ..pipeline import SetupContext


class LoadProfileStep:
    step_id = "20_load_profile"

    def run(self, ctx: SetupContext) -> None:
        # Not-found and circular-inheritance errors propagate: nothing
        # downstream can run without an effective profile.
        ctx.profile = ProfileResolver(ctx.config.profiles_dir).load_profile(ctx.profile_name)
