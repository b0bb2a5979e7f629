from __future__ import annotations

import logging
from typing import Protocol, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)
progress = logging.getLogger("adytum.progress")


class PackageBackend(Protocol):
    def install_packages(self, names: Sequence[str]) -> bool:
        ...


class DnfPackageBackend:
    """dnf (Fedora/RHEL) package installation."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def install_packages(self, names: Sequence[str]) -> bool:
        packages = [n for n in names if n]
        if not packages:
            logger.info("No packages provided")
            return True

        logger.info("Installing the following packages: %s", " ".join(packages))
        r = self.runner.run(
            ["dnf", "install", "-y", *packages],
            elevate=True,
            on_stdout=progress.info,
            on_stderr=progress.info,
        )
        if not r.success:
            logger.warning("dnf install failed (exit %s): %s", r.returncode, r.stderr.strip())
            return False

        logger.info("Successfully installed all packages")
        return True
