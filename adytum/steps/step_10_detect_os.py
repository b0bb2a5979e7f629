from __future__ import annotations

import logging

from ..pipeline import SetupContext

logger = logging.getLogger(__name__)


class DetectOSStep:
    step_id = "10_detect_os"

    def run(self, ctx: SetupContext) -> None:
        info = ctx.detector.get_os_info()
        ctx.os_info = info
        logger.info("Operating System: %s %s", info.name or "unknown", info.version)
        logger.info("System Type: %s", info.family.value)
        logger.info("Package Manager: %s", info.package_manager or "none")
