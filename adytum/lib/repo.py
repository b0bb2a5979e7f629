from __future__ import annotations

import logging
from typing import Protocol

from .command import CommandRunner
from .profiles import RepositoryDescriptor

logger = logging.getLogger(__name__)


class UnsupportedRepositoryTypeError(ValueError):
    def __init__(self, repo: RepositoryDescriptor, platform: str):
        super().__init__(f"Repository type {repo.type} not supported on {platform} (repository: {repo.name})")
        self.repo = repo
        self.platform = platform


class RepositoryBackend(Protocol):
    def enable_repository(self, repo: RepositoryDescriptor) -> bool:
        ...


class DnfRepositoryBackend:
    """Enable copr projects and plain .repo URLs through dnf."""

    platform = "Fedora"

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def enable_repository(self, repo: RepositoryDescriptor) -> bool:
        kind = repo.type.strip().lower()
        if kind == "copr":
            return self._enable_copr(repo)
        if kind == "rpm":
            return self._add_rpm_repository(repo)
        raise UnsupportedRepositoryTypeError(repo, self.platform)

    def _enable_copr(self, repo: RepositoryDescriptor) -> bool:
        if not repo.name:
            raise ValueError("copr repository has no name")
        logger.info("Enabling COPR repository: %s", repo.name)
        r = self.runner.run(["dnf", "copr", "enable", "-y", repo.name], elevate=True)
        if not r.success:
            logger.warning("Failed to enable COPR repository: %s (exit %s)", repo.name, r.returncode)
        return r.success

    def _add_rpm_repository(self, repo: RepositoryDescriptor) -> bool:
        if not repo.url:
            raise ValueError(f"rpm repository {repo.name} has no url")

        if repo.key:
            k = self.runner.run(["rpm", "--import", repo.key], elevate=True)
            if not k.success:
                # dnf will still ask about the key on first use.
                logger.warning("Failed to import signing key %s for %s: %s", repo.key, repo.name, k.stderr.strip())

        logger.info("Adding rpm repository: %s (%s)", repo.name, repo.url)
        r = self.runner.run(["dnf", "config-manager", "--add-repo", repo.url], elevate=True)
        if not r.success:
            logger.warning("Failed to add repository %s (exit %s): %s", repo.url, r.returncode, r.stderr.strip())
        return r.success
