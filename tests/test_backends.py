from __future__ import annotations

import pytest

from adytum.lib.backends import (
    BackendNotImplementedError,
    BackendSelectionError,
    PlatformNotSupportedError,
    create_package_backend,
    create_repository_backend,
)
from adytum.lib.osdetect import OSFamily
from adytum.lib.pkg import DnfPackageBackend
from adytum.lib.profiles import RepositoryDescriptor
from adytum.lib.repo import DnfRepositoryBackend, UnsupportedRepositoryTypeError
from conftest import FakeRunner


def test_install_empty_is_noop(fake_runner: FakeRunner) -> None:
    assert DnfPackageBackend(fake_runner).install_packages([]) is True
    assert fake_runner.calls == []


def test_install_runs_one_elevated_dnf(fake_runner: FakeRunner) -> None:
    ok = DnfPackageBackend(fake_runner).install_packages(["git", "zsh", "htop"])

    assert ok is True
    assert fake_runner.argvs == [["dnf", "install", "-y", "git", "zsh", "htop"]]
    call = fake_runner.calls[0]
    assert call["elevate"] is True
    assert call["on_stdout"] is not None
    assert call["on_stderr"] is not None


def test_install_failure_returns_false() -> None:
    runner = FakeRunner(fail=lambda argv: True)
    assert DnfPackageBackend(runner).install_packages(["nope"]) is False


def test_enable_copr(fake_runner: FakeRunner) -> None:
    ok = DnfRepositoryBackend(fake_runner).enable_repository(RepositoryDescriptor(name="atim/starship", type="Copr"))

    assert ok is True
    assert fake_runner.argvs == [["dnf", "copr", "enable", "-y", "atim/starship"]]
    assert fake_runner.calls[0]["elevate"] is True


def test_add_rpm_repository_imports_key_first(fake_runner: FakeRunner) -> None:
    repo = RepositoryDescriptor(
        name="vscode",
        type="rpm",
        url="https://packages.example.com/vscode.repo",
        key="https://packages.example.com/key.asc",
    )

    assert DnfRepositoryBackend(fake_runner).enable_repository(repo) is True
    assert fake_runner.argvs == [
        ["rpm", "--import", "https://packages.example.com/key.asc"],
        ["dnf", "config-manager", "--add-repo", "https://packages.example.com/vscode.repo"],
    ]
    assert all(c["elevate"] for c in fake_runner.calls)


def test_key_import_failure_does_not_stop_repo_add() -> None:
    runner = FakeRunner(fail=lambda argv: argv[0] == "rpm")
    repo = RepositoryDescriptor(name="r", type="rpm", url="https://x/r.repo", key="https://x/key")

    assert DnfRepositoryBackend(runner).enable_repository(repo) is True
    assert [a[0] for a in runner.argvs] == ["rpm", "dnf"]


def test_rpm_without_key_skips_import(fake_runner: FakeRunner) -> None:
    repo = RepositoryDescriptor(name="r", type="rpm", url="https://x/r.repo")

    DnfRepositoryBackend(fake_runner).enable_repository(repo)

    assert fake_runner.argvs == [["dnf", "config-manager", "--add-repo", "https://x/r.repo"]]


def test_rpm_without_url_is_config_error(fake_runner: FakeRunner) -> None:
    with pytest.raises(ValueError):
        DnfRepositoryBackend(fake_runner).enable_repository(RepositoryDescriptor(name="r", type="rpm"))


def test_failed_repository_returns_false() -> None:
    runner = FakeRunner(fail=lambda argv: True)
    assert DnfRepositoryBackend(runner).enable_repository(RepositoryDescriptor(name="a/b", type="copr")) is False


def test_unknown_repository_type_raises(fake_runner: FakeRunner) -> None:
    with pytest.raises(UnsupportedRepositoryTypeError) as exc:
        DnfRepositoryBackend(fake_runner).enable_repository(RepositoryDescriptor(name="x", type="ppa"))

    assert "ppa" in str(exc.value)
    assert fake_runner.calls == []


@pytest.mark.parametrize("family", [OSFamily.FEDORA, OSFamily.RHEL])
def test_dnf_families_get_dnf_backends(family: OSFamily, fake_runner: FakeRunner) -> None:
    assert isinstance(create_package_backend(family, fake_runner), DnfPackageBackend)
    assert isinstance(create_repository_backend(family, fake_runner), DnfRepositoryBackend)


@pytest.mark.parametrize("family", [OSFamily.DEBIAN, OSFamily.UBUNTU, OSFamily.ARCH])
def test_known_families_without_backend_are_not_implemented(family: OSFamily, fake_runner: FakeRunner) -> None:
    with pytest.raises(BackendNotImplementedError):
        create_package_backend(family, fake_runner)
    with pytest.raises(BackendNotImplementedError):
        create_repository_backend(family, fake_runner)


def test_unknown_family_is_not_supported(fake_runner: FakeRunner) -> None:
    with pytest.raises(PlatformNotSupportedError) as exc:
        create_package_backend(OSFamily.UNKNOWN, fake_runner)

    assert not isinstance(exc.value, BackendNotImplementedError)
    assert isinstance(exc.value, BackendSelectionError)

    with pytest.raises(PlatformNotSupportedError):
        create_repository_backend(OSFamily.UNKNOWN, fake_runner)
