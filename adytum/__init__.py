"""Adytum: provision a workstation from a declarative profile.

A run resolves a profile (with inheritance), enables its package
repositories, installs its packages and then executes its shell modules in
priority order. Every external command goes through one runner that knows
about dry runs, timeouts and privilege elevation.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
