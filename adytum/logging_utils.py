from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_LOG_PATH = "/var/log/adytum.log"
FALLBACK_LOG_NAME = "adytum.log"

_FILE_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
_CONSOLE_FORMAT = logging.Formatter("%(levelname)s %(message)s")
# Module script output is logged under adytum.lib.modules.<name>; show it.
_DEBUG_CONSOLE_FORMAT = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")


def _open_log_file(log_path: str) -> tuple[logging.Handler, str]:
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError as e:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        logging.getLogger(__name__).warning("Cannot write %s (%s), logging to %s", log_path, e, fallback)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    *,
    debug: bool = False,
    also_console: bool = True,
) -> str:
    """Set up the run log.

    The log file always records DEBUG, which includes every rendered command
    and the captured output of package managers and module scripts. The
    console shows INFO and up in a short format. With ``debug`` it shows
    everything, with timestamps and logger names so each module's output
    lines can be told apart.

    Regular users usually cannot write /var/log. In that case the file falls
    back to ./adytum.log.

    Calling this again is a no-op. Returns the log file actually in use.
    """

    root = logging.getLogger()
    if getattr(root, "_adytum_configured", False):
        return getattr(root, "_adytum_log_path", log_path)

    root.setLevel(logging.DEBUG)

    file_handler, chosen_path = _open_log_file(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_FILE_FORMAT)
    root.addHandler(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(logging.DEBUG if debug else logging.INFO)
        console.setFormatter(_DEBUG_CONSOLE_FORMAT if debug else _CONSOLE_FORMAT)
        root.addHandler(console)

    setattr(root, "_adytum_configured", True)
    setattr(root, "_adytum_log_path", chosen_path)

    logging.getLogger(__name__).debug("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path
