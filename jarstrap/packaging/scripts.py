"""
Launch scripts for the bootstrapped application.
"""

from __future__ import annotations

import logging
import shlex
import stat
from pathlib import Path
from typing import List, Optional, Sequence

from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.result import StageResult

logger = logging.getLogger(__name__)

SHELL_SCRIPT = "start.sh"
BATCH_SCRIPT = "start.bat"

EXECUTABLE_MODE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


def require_main_class(config: BuildConfiguration, purpose: str) -> Optional[StageResult]:
    """Return a failure if no main class was configured, otherwise None."""
    if config.main_class:
        return None
    msg = f"No main class specified, cannot {purpose}!"
    logger.error(msg)
    return StageResult.failure(msg)


def build_launch_command(
    java: str,
    jvm_args: Sequence[str],
    classpath: str,
    main_class: str,
) -> List[str]:
    """Build the command for launching the main class."""
    cmd = [java]
    cmd.extend(jvm_args)
    cmd.extend(["-cp", classpath, main_class])
    return cmd


def posix_launch_line(config: BuildConfiguration, classpath: str) -> str:
    """
    Render the java call for a POSIX shell script.

    ``classpath`` is inserted as-is so it can reference shell variables.
    """
    jvm = [shlex.quote(arg) for arg in config.jvm_args]
    cmd = build_launch_command("java", jvm, classpath, shlex.quote(config.main_class))
    return " ".join(cmd) + ' "$@"'


def write_script(path: Path, content: str, executable: bool = True, newline: str = "\n") -> None:
    """
    Write a script, replacing any previous one.

    Raises:
        OSError: if the file cannot be written
    """
    with open(path, "w", encoding="utf-8", newline=newline) as f:
        f.write(content)
    if executable:
        path.chmod(EXECUTABLE_MODE)


def shell_script(config: BuildConfiguration) -> str:
    lines = [
        "#!/bin/bash",
        "#",
        "BASEDIR=`dirname $0`/..",
        'BASEDIR=`(cd "$BASEDIR"; pwd)`',
        'LIB="$BASEDIR"/lib',
        'CP="$LIB/*"',
        posix_launch_line(config, '"$CP"'),
    ]
    return "\n".join(lines) + "\n"


def batch_script(config: BuildConfiguration) -> str:
    cmd = build_launch_command("java", config.jvm_args, '"%CP%"', config.main_class)
    lines = [
        "@echo off",
        "",
        "set BASEDIR=%~dp0\\..",
        "set LIB=%BASEDIR%\\lib",
        "set CP=%LIB%\\*",
        " ".join(cmd) + " %*",
    ]
    return "\n".join(lines) + "\n"


def create_scripts(config: BuildConfiguration) -> StageResult:
    """
    Generate shell/batch scripts for launching the main class.

    The scripts are placed in the bin directory next to the lib directory.
    """
    failure = require_main_class(config, "generate launch scripts")
    if failure is not None:
        return failure

    bin_dir = config.bin_dir
    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return StageResult.failure(f"Failed to create directory for scripts: {bin_dir}: {e}")

    # shell
    path = bin_dir / SHELL_SCRIPT
    try:
        write_script(path, shell_script(config))
    except OSError as e:
        logger.error(f"Failed to write shell script to: {path}")
        return StageResult.failure(f"Failed to write shell script to '{path}': {e}")

    # batch
    path = bin_dir / BATCH_SCRIPT
    try:
        write_script(path, batch_script(config), executable=False, newline="\r\n")
    except OSError as e:
        logger.error(f"Failed to write batch script to: {path}")
        return StageResult.failure(f"Failed to write batch script to '{path}': {e}")

    logger.info(f"Launch scripts written to {bin_dir}")
    return StageResult.success()
