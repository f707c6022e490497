"""
Running child processes with their output relayed to the log.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def stream_process(
    cmd: List[str],
    tag: str,
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[Path] = None,
) -> int:
    """
    Run a command and wait for it, relaying each output line to the log.

    stderr is merged into stdout. The pipe is closed and the child is waited
    for on every exit path.

    Args:
        cmd: the command to run
        tag: prefix for the relayed output lines
        env: the environment for the child, None to inherit
        cwd: the working directory, None to inherit

    Returns:
        The exit code of the process

    Raises:
        OSError: if the process cannot be started
    """
    logger.debug(f"Command: {' '.join(cmd)}")
    with subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
        env=env,
        cwd=str(cwd) if cwd is not None else None,
    ) as proc:
        try:
            for line in proc.stdout:
                logger.info(f"[{tag}] {line.rstrip()}")
        except BaseException:
            proc.kill()
            raise
    return proc.returncode
