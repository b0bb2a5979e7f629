from __future__ import annotations

import logging

from ..lib.backends import BackendNotImplementedError, PlatformNotSupportedError, create_package_backend
from ..pipeline import SetupContext

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "40_install_packages"

    def run(self, ctx: SetupContext) -> None:
        packages = ctx.require_profile().packages.install
        if not packages:
            logger.info("No packages specified in profile")
            return

        family = ctx.require_os_info().family
        try:
            backend = create_package_backend(family, ctx.runner)
        except PlatformNotSupportedError as e:
            ctx.platform_error = e
            ctx.warn(f"Skipping package installation: {e}")
            return
        except BackendNotImplementedError as e:
            ctx.warn(f"Skipping package installation: {e}")
            return

        if not backend.install_packages(packages):
            ctx.warn(f"Package installation failed ({len(packages)} packages)")
