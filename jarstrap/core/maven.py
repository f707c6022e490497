"""
Invoking Maven on the rendered pom.xml.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List

from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.process import stream_process
from jarstrap.core.result import StageResult
from jarstrap.core.template import RenderedDescriptor
from jarstrap.core.toolchain import ResolvedToolchain

logger = logging.getLogger(__name__)

GOAL_CLEAN = "clean"
GOAL_PACKAGE = "package"
GOAL_DEBIAN = "jdeb:jdeb"
GOAL_REDHAT = "rpm:rpm"


def build_goals(config: BuildConfiguration) -> List[str]:
    """
    Assemble the goals in execution order.

    Later goals rely on the artifacts of the earlier ones.
    """
    goals = []
    if config.clean:
        goals.append(GOAL_CLEAN)
    goals.append(GOAL_PACKAGE)
    if config.debian:
        goals.append(GOAL_DEBIAN)
    if config.redhat:
        goals.append(GOAL_REDHAT)
    return goals


def build_command(
    config: BuildConfiguration,
    toolchain: ResolvedToolchain,
    descriptor: RenderedDescriptor,
) -> List[str]:
    """Build the Maven command line."""
    cmd = [str(toolchain.mvn_executable), "-B", "-f", str(descriptor.pom_file)]
    if config.maven_user_settings is not None:
        cmd.extend(["-s", str(config.maven_user_settings)])
    cmd.extend(build_goals(config))
    return cmd


def execute_maven(
    config: BuildConfiguration,
    toolchain: ResolvedToolchain,
    descriptor: RenderedDescriptor,
    dry_run: bool = False,
) -> StageResult:
    """
    Run Maven once to pull in the artifacts and package them.

    Returns:
        Failure if Maven cannot be started or exits with a non-zero code
    """
    cmd = build_command(config, toolchain, descriptor)
    if dry_run:
        logger.info(f"[DRY RUN] Would execute: {' '.join(cmd)}")
        return StageResult.success()

    logger.info(f"Running Maven: {' '.join(build_goals(config))}")
    try:
        exit_code = stream_process(
            cmd,
            tag="mvn",
            env=toolchain.environment(),
            cwd=descriptor.pom_file.parent,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"Failed to bootstrap the application: {e}")
        return StageResult.failure(f"Failed to bootstrap the application: {e}")

    if exit_code != 0:
        return StageResult.failure(
            f"Failed to bootstrap the application, Maven exited with code {exit_code}"
        )
    return StageResult.success()
