from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .lib.command import DEFAULT_ELEVATION_HELPER, DEFAULT_TIMEOUT_S
from .lib.env import Paths


@dataclass(frozen=True)
class RunConfig:
    paths: Paths
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def profiles_dir(self) -> str:
        return self._path("profiles_dir", self.paths.profiles_dir)

    @property
    def modules_dir(self) -> str:
        return self._path("modules_dir", self.paths.modules_dir)

    @property
    def module_timeout_s(self) -> float:
        value = (self.raw.get("commands") or {}).get("timeout_s")
        if value is None:
            return float(DEFAULT_TIMEOUT_S)
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"commands.timeout_s must be a number, got {value!r}") from None
        if timeout <= 0:
            raise ValueError(f"commands.timeout_s must be positive, got {value!r}")
        return timeout

    @property
    def elevation_helper(self) -> str:
        return str(((self.raw.get("elevation") or {}).get("helper")) or DEFAULT_ELEVATION_HELPER)

    def _path(self, key: str, default: str) -> str:
        value = (self.raw.get("paths") or {}).get(key)
        if not value:
            return default
        # Relative entries are relative to the conf dir.
        return str(Path(self.paths.conf_dir) / str(value))


def load_run_config(paths: Paths, path: str | None = None) -> RunConfig:
    """Read the optional YAML run configuration (defaults when absent)."""

    p = Path(path or paths.config_path)
    if not p.exists():
        if path:
            raise FileNotFoundError(f"Run config not found: {path}")
        return RunConfig(paths=paths)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError(f"run config must be YAML: {p}")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the run config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p} must contain a mapping/object")

    config = RunConfig(paths=paths, raw=raw)
    # Validated here so a bad value fails before any step runs.
    config.module_timeout_s
    return config
