from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

PROFILE_SUFFIXES = (".yaml", ".yml")


class ProfileNotFoundError(FileNotFoundError):
    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or f"Profile not found: {name}")
        self.name = name


class ParentProfileNotFoundError(ProfileNotFoundError):
    def __init__(self, name: str, child: str):
        super().__init__(name, f"Parent profile not found: {name} (inherited by {child})")
        self.child = child


class ProfileReadError(ValueError):
    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Cannot read profile {path}: {cause.strerror or cause}")
        self.path = path


class CircularInheritanceError(ValueError):
    def __init__(self, chain: Sequence[str]):
        super().__init__("Circular profile inheritance: " + " -> ".join(chain))
        self.chain = list(chain)


@dataclass(frozen=True)
class RepositoryDescriptor:
    name: str
    type: str
    url: Optional[str] = None
    key: Optional[str] = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RepositoryDescriptor":
        if not isinstance(raw, dict):
            raise ValueError(f"Repository entry must be a mapping, got {type(raw).__name__}")
        name = str(raw.get("name") or "").strip()
        repo_type = str(raw.get("type") or "").strip()
        if not repo_type:
            raise ValueError(f"Repository {name or '<unnamed>'} has no type")
        meta = raw.get("metadata") or {}
        if not isinstance(meta, dict):
            raise ValueError(f"Repository {name}: metadata must be a mapping")
        return cls(
            name=name,
            type=repo_type,
            url=_opt_str(raw.get("url")),
            key=_opt_str(raw.get("key")),
            metadata={str(k): str(v) for k, v in meta.items()},
        )


@dataclass(frozen=True)
class ModuleConfig:
    enabled: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PackageConfig:
    install: Tuple[str, ...] = ()
    repositories: Tuple[RepositoryDescriptor, ...] = ()
    copr: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Profile:
    name: str
    description: str = ""
    inherit: Optional[str] = None
    modules: ModuleConfig = field(default_factory=ModuleConfig)
    packages: PackageConfig = field(default_factory=PackageConfig)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase document form, as the profile files are written."""

        return {
            "name": self.name,
            "description": self.description,
            "inherit": self.inherit,
            "modules": {"enabled": list(self.modules.enabled)},
            "packages": {
                "install": list(self.packages.install),
                "copr": list(self.packages.copr),
                "repositories": [
                    {
                        "name": r.name,
                        "type": r.type,
                        "url": r.url,
                        "key": r.key,
                        "metadata": dict(r.metadata),
                    }
                    for r in self.packages.repositories
                ],
            },
        }


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _str_list(raw: Mapping[str, Any], key: str, where: str) -> Tuple[str, ...]:
    values = raw.get(key) or []
    if not isinstance(values, list):
        raise ValueError(f"{where}.{key} must be a list")
    return tuple(str(v).strip() for v in values if str(v).strip())


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping")
    return value


def profile_from_dict(raw: Mapping[str, Any], *, default_name: str = "") -> Profile:
    modules = _section(raw, "modules")
    packages = _section(raw, "packages")

    repos_raw = packages.get("repositories") or []
    if not isinstance(repos_raw, list):
        raise ValueError("packages.repositories must be a list")

    return Profile(
        name=str(raw.get("name") or default_name),
        description=str(raw.get("description") or ""),
        inherit=_opt_str(raw.get("inherit")),
        modules=ModuleConfig(enabled=_str_list(modules, "enabled", "modules")),
        packages=PackageConfig(
            install=_str_list(packages, "install", "packages"),
            repositories=tuple(RepositoryDescriptor.from_dict(r) for r in repos_raw),
            copr=_str_list(packages, "copr", "packages"),
        ),
    )


def merge_profiles(parent: Profile, child: Profile) -> Profile:
    """Child scalars win; lists are parent entries followed by child entries."""

    return Profile(
        name=child.name,
        description=child.description,
        inherit=child.inherit,
        modules=ModuleConfig(enabled=parent.modules.enabled + child.modules.enabled),
        packages=PackageConfig(
            install=parent.packages.install + child.packages.install,
            repositories=parent.packages.repositories + child.packages.repositories,
            copr=parent.packages.copr + child.packages.copr,
        ),
    )


def convert_legacy(profile: Profile) -> Profile:
    """Return a profile where every `copr` shorthand has a copr repository entry."""

    repos: List[RepositoryDescriptor] = list(profile.packages.repositories)
    for name in profile.packages.copr:
        if any(r.type.lower() == "copr" and r.name == name for r in repos):
            continue
        repos.append(RepositoryDescriptor(name=name, type="copr"))

    if len(repos) == len(profile.packages.repositories):
        return profile
    return replace(profile, packages=replace(profile.packages, repositories=tuple(repos)))


class ProfileResolver:
    """Load profiles from a directory, following `inherit` chains."""

    def __init__(self, profiles_dir: str | Path):
        self.profiles_dir = Path(profiles_dir)

    def profile_path(self, name: str) -> Optional[Path]:
        for suffix in PROFILE_SUFFIXES:
            p = self.profiles_dir / f"{name}{suffix}"
            if p.is_file():
                return p
        return None

    def load_profile(self, name: str) -> Profile:
        logger.info("Loading profile: %s", name)
        if self.profile_path(name) is None:
            raise ProfileNotFoundError(name)

        profile = convert_legacy(self._resolve(name, []))

        logger.info("Profile %s: %s", profile.name, profile.description)
        logger.debug("Effective profile: %s", profile.to_dict())
        return profile

    def _resolve(self, name: str, chain: List[str]) -> Profile:
        if name in chain:
            raise CircularInheritanceError([*chain, name])

        path = self.profile_path(name)
        if path is None:
            if chain:
                raise ParentProfileNotFoundError(name, chain[-1])
            raise ProfileNotFoundError(name)

        profile = profile_from_dict(self._read(path), default_name=name)
        if not profile.inherit:
            return profile

        logger.info("Profile %s inherits from: %s", profile.name, profile.inherit)
        parent = self._resolve(profile.inherit, [*chain, name])
        return merge_profiles(parent, profile)

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("PyYAML required to load profiles") from e

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ProfileReadError(path, e) from e

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid profile document {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Profile must be a mapping/dict: {path}")
        return data
