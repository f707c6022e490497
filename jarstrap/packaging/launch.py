"""
Launching the main class of the bootstrapped application.
"""

from __future__ import annotations

import logging
import os
import subprocess

from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.process import stream_process
from jarstrap.core.result import StageResult
from jarstrap.core.toolchain import ResolvedToolchain
from jarstrap.packaging.scripts import build_launch_command, require_main_class

logger = logging.getLogger(__name__)


def launch_main_class(
    config: BuildConfiguration,
    toolchain: ResolvedToolchain,
    dry_run: bool = False,
) -> StageResult:
    """Run the main class with the libraries of the build and wait for it."""
    failure = require_main_class(config, "launch application")
    if failure is not None:
        return failure

    cmd = build_launch_command(
        str(toolchain.java_executable),
        config.jvm_args,
        str(config.lib_dir) + os.sep + "*",
        config.main_class,
    )
    if dry_run:
        logger.info(f"[DRY RUN] Would execute: {' '.join(cmd)}")
        return StageResult.success()

    logger.info(f"Launching {config.main_class}")
    try:
        exit_code = stream_process(cmd, tag=config.name, env=toolchain.environment())
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"Failed to launch class: {e}")
        return StageResult.failure(f"Failed to launch class: {e}")

    if exit_code != 0:
        return StageResult.failure(f"Failed to launch class ({' '.join(cmd)}): {exit_code}")
    return StageResult.success()
