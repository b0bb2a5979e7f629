from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence

logger = logging.getLogger(__name__)

RELEASE_PATHS = ("/etc/os-release", "/usr/lib/os-release")


class OSFamily(str, enum.Enum):
    FEDORA = "fedora"
    RHEL = "rhel"
    DEBIAN = "debian"
    UBUNTU = "ubuntu"
    ARCH = "arch"
    UNKNOWN = "unknown"


_FAMILY_BY_ID = {
    "fedora": OSFamily.FEDORA,
    "rhel": OSFamily.RHEL,
    "debian": OSFamily.DEBIAN,
    "ubuntu": OSFamily.UBUNTU,
    "arch": OSFamily.ARCH,
}

_PACKAGE_MANAGER = {
    OSFamily.FEDORA: "dnf",
    OSFamily.RHEL: "dnf",
    OSFamily.DEBIAN: "apt",
    OSFamily.UBUNTU: "apt",
    OSFamily.ARCH: "pacman",
}


@dataclass(frozen=True)
class OSInfo:
    family: OSFamily = OSFamily.UNKNOWN
    release_fields: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.release_fields.get("NAME", "")

    @property
    def version(self) -> str:
        return self.release_fields.get("VERSION", "")

    @property
    def package_manager(self) -> str:
        return _PACKAGE_MANAGER.get(self.family, "")


def map_family(os_id: Optional[str]) -> OSFamily:
    if not os_id:
        return OSFamily.UNKNOWN
    return _FAMILY_BY_ID.get(os_id.strip().lower(), OSFamily.UNKNOWN)


def parse_release_text(text: str, into: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Parse os-release style KEY=VALUE lines.

    Blank lines and '#' comments are skipped; one layer of surrounding double
    quotes is stripped from values.
    """

    fields = into if into is not None else {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        fields[key.strip()] = value
    return fields


class OSDetector:
    """Identify the running distribution from os-release metadata (memoized)."""

    def __init__(self, release_paths: Sequence[str] = RELEASE_PATHS):
        self.release_paths = [Path(p) for p in release_paths]
        self._info: Optional[OSInfo] = None

    def get_os_info(self) -> OSInfo:
        if self._info is None:
            self._info = self._load()
        return self._info

    def _load(self) -> OSInfo:
        fields: Dict[str, str] = {}
        for path in self.release_paths:
            # Later locations only fill in when the primary identity is missing.
            if "ID" in fields:
                break
            self._parse_file(path, fields)

        info = OSInfo(family=map_family(fields.get("ID")), release_fields=fields)
        logger.info(
            "OS: name=%s version=%s family=%s",
            info.name or "unknown",
            info.version or "unknown",
            info.family.value,
        )
        return info

    def _parse_file(self, path: Path, fields: Dict[str, str]) -> None:
        if not path.exists():
            return
        try:
            parse_release_text(path.read_text(encoding="utf-8", errors="ignore"), into=fields)
        except OSError as e:
            logger.warning("Error parsing OS release file %s: %s", path, e)

