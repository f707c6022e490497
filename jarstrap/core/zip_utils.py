"""
Methods for handling zip files.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import zipfile
import zlib
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1024 * 1024

# raised when reading an entry: encrypted, unsupported compression, corrupt data
ENTRY_ERRORS = (OSError, zipfile.BadZipFile, RuntimeError, NotImplementedError, zlib.error)


def decompress(
    input_file: Path,
    output_dir: Path,
    create_dirs: bool = True,
    errors: Optional[List[str]] = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> List[Path]:
    """
    Extract all entries of a ZIP file.

    Problems with individual entries are appended to ``errors`` and do not
    stop the extraction of the remaining entries. Callers should treat a
    non-empty error list as overall failure.

    Args:
        input_file: the ZIP file to extract
        output_dir: the directory to store the extracted files in
        create_dirs: whether to re-create the directory structure of the
            archive; if False, all files end up directly in output_dir
        errors: list for collecting error messages
        buffer_size: the buffer size to use when copying data

    Returns:
        The successfully extracted files
    """
    if errors is None:
        errors = []
    result: List[Path] = []
    output_dir = Path(output_dir).absolute()

    try:
        archive = zipfile.ZipFile(input_file)
    except (OSError, zipfile.BadZipFile) as e:
        msg = f"Error occurred opening '{input_file}': {e}"
        logger.error(msg)
        errors.append(msg)
        return result

    with archive:
        for entry in archive.infolist():
            if entry.is_dir():
                if not create_dirs:
                    continue
                out_dir = output_dir / entry.filename
                if not _is_within(out_dir, output_dir):
                    msg = f"Skipping '{entry.filename}', it points outside of '{output_dir}'!"
                    logger.error(msg)
                    errors.append(msg)
                    continue
                try:
                    out_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    msg = f"Failed to create directory '{out_dir}': {e}"
                    logger.error(msg)
                    errors.append(msg)
                continue

            # assemble output name
            if create_dirs:
                out_file = output_dir / entry.filename
            else:
                out_file = output_dir / Path(entry.filename).name
            if not _is_within(out_file, output_dir):
                msg = f"Skipping '{entry.filename}', it points outside of '{output_dir}'!"
                logger.error(msg)
                errors.append(msg)
                continue

            # create directory, if necessary
            try:
                out_file.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                msg = (
                    f"Failed to create directory '{out_file.parent}', "
                    f"skipping extraction of '{out_file}': {e}"
                )
                logger.error(msg)
                errors.append(msg)
                continue

            # extract data
            try:
                with archive.open(entry) as src, open(out_file, "wb") as dst:
                    shutil.copyfileobj(src, dst, buffer_size)
                result.append(out_file)
            except ENTRY_ERRORS as e:
                msg = f"Error extracting '{entry.filename}' to '{out_file}': {e}"
                logger.error(msg)
                errors.append(msg)

    logger.debug(f"Extracted {len(result)} file(s) from {input_file} ({len(errors)} error(s))")
    return result


def _is_within(path: Path, root: Path) -> bool:
    try:
        Path(os.path.normpath(path)).relative_to(root)
    except ValueError:
        return False
    return True


def set_executables(home: Path, relative_paths: Iterable[str]) -> List[Path]:
    """
    Add the executable bits to the listed files below ``home``.

    Does nothing on Windows.

    Returns:
        The files that were updated
    """
    updated: List[Path] = []
    if os.name == "nt":
        return updated

    for rel in relative_paths:
        path = Path(home) / rel
        if not path.is_file():
            logger.warning(f"Cannot make executable, file not found: {path}")
            continue
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        updated.append(path)

    return updated
