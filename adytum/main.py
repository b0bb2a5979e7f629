from __future__ import annotations

import argparse
import logging
from typing import Optional

from . import __version__
from .config import load_run_config
from .lib.command import CommandRunner
from .lib.env import PATHS, Paths
from .lib.osdetect import OSDetector
from .lib.profiles import CircularInheritanceError, ProfileNotFoundError, ProfileReadError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, SetupContext, run_pipeline
from .steps import (
    DetectOSStep,
    EnableRepositoriesStep,
    InstallPackagesStep,
    LoadProfileStep,
    RunModulesStep,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROFILE_ERROR = 1
EXIT_PLATFORM_UNSUPPORTED = 2
EXIT_WARNINGS = 3


def build_steps():
    return [
        DetectOSStep(),
        LoadProfileStep(),
        EnableRepositoriesStep(),
        InstallPackagesStep(),
        RunModulesStep(),
    ]


def exit_code_for(result: PipelineResult, *, strict: bool = False) -> int:
    if result.platform_error is not None:
        return EXIT_PLATFORM_UNSUPPORTED
    if strict and result.warnings:
        return EXIT_WARNINGS
    return EXIT_OK


def run_setup(
    *,
    profile_name: str,
    conf_dir: Optional[str] = None,
    lib_dir: Optional[str] = None,
    config_path: Optional[str] = None,
    dry_run: bool = False,
    debug: bool = False,
    detector: Optional[OSDetector] = None,
    runner: Optional[CommandRunner] = None,
) -> PipelineResult:
    """detect OS -> resolve profile -> repositories -> packages -> modules."""

    paths = Paths(conf_dir=conf_dir or PATHS.conf_dir, lib_dir=lib_dir or PATHS.lib_dir).resolved()

    config = load_run_config(paths, config_path)
    if runner is None:
        runner = CommandRunner(dry_run=dry_run, elevation_helper=config.elevation_helper)
    if runner.dry_run:
        logger.info("Dry run: commands are logged, not executed")

    ctx = SetupContext(
        profile_name=profile_name,
        config=config,
        runner=runner,
        detector=detector or OSDetector(),
        debug=debug,
    )
    result = run_pipeline(ctx=ctx, steps=build_steps())

    if result.warnings:
        logger.warning("Setup finished with %d warning(s):", len(result.warnings))
        for w in result.warnings:
            logger.warning("  - %s", w)
    else:
        logger.info("All tasks completed successfully!")
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="adytum")
    sub = p.add_subparsers(dest="command", required=True)

    setup = sub.add_parser("setup", help="Set up this machine from a profile")
    setup.add_argument("-p", "--profile", required=True, help="Profile to apply (name under profiles.d)")
    setup.add_argument("-d", "--debug", action="store_true", help="Enable debug output")
    setup.add_argument("--dry-run", action="store_true", help="Log commands instead of running them")
    setup.add_argument("--strict", action="store_true", help="Exit non-zero when any warning was recorded")
    setup.add_argument("--conf-dir", default=None, help="Configuration directory (default: ./conf)")
    setup.add_argument("--lib-dir", default=None, help="Library directory exported to modules (default: ./lib)")
    setup.add_argument("--config", default=None, help="Run config (default: <conf-dir>/adytum.yaml)")
    setup.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")

    sub.add_parser("version", help="Show version information")

    args = p.parse_args(argv)

    if args.command == "version":
        print(f"adytum {__version__}")
        return EXIT_OK

    configure_logging(log_path=args.log, debug=bool(args.debug))

    try:
        result = run_setup(
            profile_name=args.profile,
            conf_dir=args.conf_dir,
            lib_dir=args.lib_dir,
            config_path=args.config,
            dry_run=bool(args.dry_run),
            debug=bool(args.debug),
        )
    except (ProfileNotFoundError, CircularInheritanceError, ProfileReadError) as e:
        logger.error("%s", e)
        return EXIT_PROFILE_ERROR
    except OSError as e:
        logger.error("%s", e)
        return EXIT_PROFILE_ERROR
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_PROFILE_ERROR

    return exit_code_for(result, strict=bool(args.strict))


def entrypoint() -> None:
    raise SystemExit(main())
