"""
Input files for building Debian and RPM packages.

The package builders themselves run as Maven plugins (jdeb, rpm-maven-plugin)
during the build; the files written here must exist before the build starts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.result import StageResult
from jarstrap.packaging.scripts import posix_launch_line, require_main_class, write_script

logger = logging.getLogger(__name__)

# relative to the project root
DEBIAN_SCRIPT_DIR = Path("src/deb/resources/usr/bin")
DEBIAN_CONTROL_DIR = Path("src/deb/control")
REDHAT_SCRIPT_DIR = Path("src/rpm/resources/usr/bin")

# installation layout inside the package
INSTALL_LIB_DIR = "/usr/lib/{name}"

DEBIAN_DEPENDS = "default-jre-headless | java-runtime-headless"


def package_launch_script(config: BuildConfiguration) -> str:
    classpath = '"' + INSTALL_LIB_DIR.format(name=config.name) + '/*"'
    lines = [
        "#!/bin/bash",
        "#",
        posix_launch_line(config, classpath),
    ]
    return "\n".join(lines) + "\n"


def debian_control(config: BuildConfiguration) -> str:
    lines = [
        f"Package: {config.name.lower()}",
        f"Version: {config.version}",
        "Section: java",
        "Priority: optional",
        "Architecture: all",
        f"Depends: {DEBIAN_DEPENDS}",
        f"Maintainer: {config.name} maintainers <root@localhost>",
        f"Description: {config.name} ({config.main_class})",
    ]
    return "\n".join(lines) + "\n"


def _write_launch_script(config: BuildConfiguration, script_dir: Path, kind: str) -> StageResult:
    target_dir = Path(config.output_dir) / script_dir
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return StageResult.failure(f"Failed to create directory for {kind} launch script: {target_dir}: {e}")

    path = target_dir / config.name
    try:
        write_script(path, package_launch_script(config))
    except OSError as e:
        logger.error(f"Failed to write {kind} launch script to: {path}")
        return StageResult.failure(f"Failed to write {kind} launch script to '{path}': {e}")

    logger.info(f"{kind} launch script written to {path}")
    return StageResult.success()


def _write_control_file(config: BuildConfiguration) -> StageResult:
    control_dir = Path(config.output_dir) / DEBIAN_CONTROL_DIR
    path = control_dir / "control"
    try:
        control_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(debian_control(config), encoding="utf-8")
    except OSError as e:
        return StageResult.failure(f"Failed to write Debian control file to '{path}': {e}")
    return StageResult.success()


def create_debian_files(config: BuildConfiguration) -> StageResult:
    """Write the launch script and control file used by jdeb."""
    failure = require_main_class(config, "generate Debian package")
    if failure is not None:
        return failure
    return _write_launch_script(config, DEBIAN_SCRIPT_DIR, "Debian").then(
        lambda: _write_control_file(config)
    )


def create_redhat_files(config: BuildConfiguration) -> StageResult:
    """Write the launch script used by the rpm-maven-plugin."""
    failure = require_main_class(config, "generate RPM package")
    if failure is not None:
        return failure
    return _write_launch_script(config, REDHAT_SCRIPT_DIR, "RPM")
