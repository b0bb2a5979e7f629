from __future__ import annotations

from typing import Callable, Dict, Optional

from .command import CommandRunner
from .osdetect import OSFamily
from .pkg import DnfPackageBackend, PackageBackend
from .repo import DnfRepositoryBackend, RepositoryBackend


class BackendSelectionError(RuntimeError):
    def __init__(self, family: OSFamily | str, what: str, message: str):
        super().__init__(message)
        self.family = family
        self.what = what


class BackendNotImplementedError(BackendSelectionError):
    """A known distribution we have no backend for yet."""

    def __init__(self, family: OSFamily | str, what: str):
        super().__init__(family, what, f"{what} backend for {_label(family)} is not implemented")


class PlatformNotSupportedError(BackendSelectionError):
    """The host is not a platform this tool knows about."""

    def __init__(self, family: OSFamily | str, what: str):
        super().__init__(family, what, f"Current platform ({_label(family)}) is not supported for {what} management")


def _label(family: OSFamily | str) -> str:
    return family.value if isinstance(family, OSFamily) else str(family)


# One entry per known family; None marks a family with no backend yet.
_PACKAGE_BACKENDS: Dict[OSFamily, Optional[Callable[[CommandRunner], PackageBackend]]] = {
    OSFamily.FEDORA: DnfPackageBackend,
    OSFamily.RHEL: DnfPackageBackend,
    OSFamily.DEBIAN: None,
    OSFamily.UBUNTU: None,
    OSFamily.ARCH: None,
}

_REPOSITORY_BACKENDS: Dict[OSFamily, Optional[Callable[[CommandRunner], RepositoryBackend]]] = {
    OSFamily.FEDORA: DnfRepositoryBackend,
    OSFamily.RHEL: DnfRepositoryBackend,
    OSFamily.DEBIAN: None,
    OSFamily.UBUNTU: None,
    OSFamily.ARCH: None,
}


def _select(table, family, runner: CommandRunner, what: str):
    if family not in table:
        raise PlatformNotSupportedError(family, what)
    factory = table[family]
    if factory is None:
        raise BackendNotImplementedError(family, what)
    return factory(runner)


def create_package_backend(family: OSFamily, runner: CommandRunner) -> PackageBackend:
    return _select(_PACKAGE_BACKENDS, family, runner, "package")


def create_repository_backend(family: OSFamily, runner: CommandRunner) -> RepositoryBackend:
    return _select(_REPOSITORY_BACKENDS, family, runner, "repository")
