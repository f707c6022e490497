"""
Dockerfile generation for the bootstrapped application.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.result import StageResult
from jarstrap.packaging.scripts import posix_launch_line, require_main_class, write_script

logger = logging.getLogger(__name__)

DOCKERFILE = "Dockerfile"
# relative to the project root
SCRIPT_PATH = Path("docker/start.sh")

# layout inside the image
IMAGE_HOME = "/jarstrap"
IMAGE_LIB_DIR = f"{IMAGE_HOME}/lib"
IMAGE_SOURCES_DIR = f"{IMAGE_HOME}/sources"
IMAGE_SCRIPT = f"{IMAGE_HOME}/bin/start.sh"


def container_launch_script(config: BuildConfiguration) -> str:
    lines = [
        "#!/bin/sh",
        "#",
        posix_launch_line(config, f'"{IMAGE_LIB_DIR}/*"'),
    ]
    return "\n".join(lines) + "\n"


def _relative(path: Path, root: Path) -> str:
    return Path(path).relative_to(root).as_posix()


def dockerfile(config: BuildConfiguration, instructions: str = "") -> str:
    root = Path(config.output_dir).absolute()
    lines = [f"FROM {config.docker_base_image}", ""]
    if instructions:
        lines.append(instructions.rstrip("\n"))
        lines.append("")
    lines.append(f"COPY {_relative(config.lib_dir, root)} {IMAGE_LIB_DIR}")
    if config.sources:
        lines.append(f"COPY {_relative(config.sources_dir, root)} {IMAGE_SOURCES_DIR}")
    lines.append(f"COPY {SCRIPT_PATH.as_posix()} {IMAGE_SCRIPT}")
    lines.append(f'CMD ["{IMAGE_SCRIPT}"]')
    return "\n".join(lines) + "\n"


def create_docker_files(config: BuildConfiguration) -> StageResult:
    """
    Generate the launch script and the Dockerfile.

    Logs the commands for building and running the image afterwards.
    """
    if not config.docker_base_image:
        msg = "No base image specified, cannot generate Dockerfile!"
        logger.error(msg)
        return StageResult.failure(msg)
    failure = require_main_class(config, "generate Dockerfile")
    if failure is not None:
        return failure

    instructions = ""
    if config.docker_instructions is not None:
        try:
            instructions = Path(config.docker_instructions).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return StageResult.failure(
                f"Failed to read Docker instructions from '{config.docker_instructions}': {e}"
            )

    root = Path(config.output_dir).absolute()
    script = root / SCRIPT_PATH
    try:
        script.parent.mkdir(parents=True, exist_ok=True)
        write_script(script, container_launch_script(config))
    except OSError as e:
        logger.error(f"Failed to write Docker launch script to: {script}")
        return StageResult.failure(f"Failed to write Docker launch script to '{script}': {e}")

    path = root / DOCKERFILE
    try:
        path.write_text(dockerfile(config, instructions), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write Dockerfile to: {path}")
        return StageResult.failure(f"Failed to write Dockerfile to '{path}': {e}")

    tag = f"{config.name.lower()}:{config.version}"
    logger.info(f"Dockerfile written to {path}")
    logger.info("Build the image with:")
    logger.info(f"  docker build -t {tag} {root}")
    logger.info("Run the image with:")
    logger.info(f"  docker run -it {tag}")
    return StageResult.success()
