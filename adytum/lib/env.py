from __future__ import annotations

import socket
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from .profiles import Profile


@dataclass(frozen=True)
class Paths:
    conf_dir: str = "conf"
    lib_dir: str = "lib"
    profiles_subdir: str = "profiles.d"
    modules_subdir: str = "modules.d"
    config_name: str = "adytum.yaml"

    def resolved(self) -> "Paths":
        return replace(
            self,
            conf_dir=str(Path(self.conf_dir).resolve()),
            lib_dir=str(Path(self.lib_dir).resolve()),
        )

    @property
    def profiles_dir(self) -> str:
        return str(Path(self.conf_dir) / self.profiles_subdir)

    @property
    def modules_dir(self) -> str:
        return str(Path(self.conf_dir) / self.modules_subdir)

    @property
    def config_path(self) -> str:
        return str(Path(self.conf_dir) / self.config_name)


PATHS = Paths()


def module_environment(
    paths: Paths,
    *,
    debug: bool = False,
    profile: Optional[Profile] = None,
    hostname: Optional[str] = None,
) -> Dict[str, str]:
    """Variables every module script receives on top of the host environment."""

    env = {
        "CONF_DIR": paths.conf_dir,
        "LIB_DIR": paths.lib_dir,
        "DEBUG": "yes" if debug else "",
        "HOST": hostname if hostname is not None else socket.gethostname(),
    }
    if profile is not None:
        env["PROFILE_NAME"] = profile.name
        env["PROFILE_DESC"] = profile.description
    return env
