from __future__ import annotations

import logging

from ..lib.backends import BackendNotImplementedError, PlatformNotSupportedError, create_repository_backend
from ..lib.repo import UnsupportedRepositoryTypeError
from ..pipeline import SetupContext

logger = logging.getLogger(__name__)


class EnableRepositoriesStep:
    step_id = "30_enable_repositories"

    def run(self, ctx: SetupContext) -> None:
        repos = ctx.require_profile().packages.repositories
        if not repos:
            logger.info("No repositories specified in profile")
            return

        family = ctx.require_os_info().family
        try:
            backend = create_repository_backend(family, ctx.runner)
        except PlatformNotSupportedError as e:
            ctx.platform_error = e
            ctx.warn(f"Skipping repositories: {e}")
            return
        except BackendNotImplementedError as e:
            ctx.warn(f"Skipping repositories: {e}")
            return

        logger.info("Processing repositories (%d)", len(repos))
        for repo in repos:
            logger.info("Enabling %s repository: %s", repo.type, repo.name)
            try:
                ok = backend.enable_repository(repo)
            except UnsupportedRepositoryTypeError as e:
                # Configuration error: stop the phase, keep the run going.
                ctx.warn(f"Repository phase aborted: {e}")
                return
            except ValueError as e:
                ctx.warn(f"Invalid repository {repo.name} ({repo.type}): {e}")
                continue
            if not ok:
                ctx.warn(f"Failed to enable repository: {repo.name} ({repo.type})")
