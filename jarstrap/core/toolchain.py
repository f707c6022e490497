"""
Locating (and, if necessary, provisioning) Maven and Java.

Maven is taken from an explicitly supplied directory or from the per-user
cache. A missing cache entry gets populated either from a local archive
("bundled" mode) or by downloading the Apache Maven binary distribution
("download" mode).
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from tqdm import tqdm

from jarstrap.config import get_toolchain_settings
from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.zip_utils import decompress, set_executables

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

# files in a Maven installation that need the executable bit
MAVEN_EXECUTABLES = ("bin/mvn", "bin/mvnDebug", "bin/mvnyjp")

MODE_DOWNLOAD = "download"
MODE_BUNDLED = "bundled"

DOWNLOAD_CHUNK_SIZE = 64 * 1024
DOWNLOAD_TIMEOUT = 60


class ToolchainError(Exception):
    """Raised when Maven or Java cannot be located or provisioned."""


@dataclass(frozen=True)
class ResolvedToolchain:
    """The Maven and Java installations used for a run."""
    maven_home: Path
    java_home: Path

    @property
    def mvn_executable(self) -> Path:
        return self.maven_home / "bin" / ("mvn.cmd" if IS_WINDOWS else "mvn")

    @property
    def java_executable(self) -> Path:
        return self.java_home / "bin" / ("java.exe" if IS_WINDOWS else "java")

    def environment(self, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Environment for child processes, pointing at the resolved homes."""
        env = dict(os.environ if base is None else base)
        env["JAVA_HOME"] = str(self.java_home)
        env["MAVEN_HOME"] = str(self.maven_home)
        return env


def maven_home_dir(settings: Optional[Dict[str, Any]] = None) -> Path:
    """
    Return the home directory for the provisioned Maven installation.

    The JARSTRAP_HOME environment variable (or the "home" setting) wins,
    otherwise a per-user directory keyed by the Maven version is used.
    """
    settings = settings if settings is not None else get_toolchain_settings()
    if settings.get("home"):
        return Path(settings["home"]).expanduser()

    base = Path.home()
    if not IS_WINDOWS:
        base = base / ".local" / "share"
    return base / "jarstrap" / f"mvn-{settings['maven_version']}"


def download_archive(url: str, dest: Path) -> Path:
    """
    Download a file, showing progress.

    The data is written to a temporary file next to ``dest`` first.

    Raises:
        ToolchainError: if the download fails
    """
    dest = Path(dest)
    tmp_path = dest.with_name(f".{dest.name}.tmp")
    logger.info(f"Downloading {url}")
    try:
        with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length", 0)) or None
            with open(tmp_path, "wb") as f, tqdm(
                total=total, unit="B", unit_scale=True, desc=dest.name
            ) as progress:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
                    progress.update(len(chunk))
        os.replace(tmp_path, dest)
    except requests.exceptions.RequestException as e:
        tmp_path.unlink(missing_ok=True)
        raise ToolchainError(f"Failed to download '{url}': {e}")
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ToolchainError(f"Failed to store download in '{dest}': {e}")

    logger.info(f"Download completed: {dest}")
    return dest


def install_maven(archive: Path, home: Path) -> None:
    """
    Install a Maven binary distribution (zip) as ``home``.

    The archive is extracted into a staging directory next to ``home`` and
    its single top-level directory is then moved into place.

    Raises:
        ToolchainError: if extraction fails or the layout is unexpected
    """
    home = Path(home)
    try:
        home.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{home.name}-", dir=home.parent))
    except OSError as e:
        raise ToolchainError(f"Failed to create directory for Maven installation: {home.parent}: {e}")

    try:
        errors: List[str] = []
        decompress(archive, staging, create_dirs=True, errors=errors)
        if errors:
            raise ToolchainError(
                f"Failed to extract Maven archive '{archive}':\n" + "\n".join(errors)
            )

        candidates = [p for p in staging.iterdir() if p.is_dir()]
        if len(candidates) == 1 and (candidates[0] / "bin").is_dir():
            root = candidates[0]
        elif (staging / "bin").is_dir():
            root = staging
        else:
            raise ToolchainError(f"Unexpected structure after extracting Maven archive: {archive}")

        try:
            if root == staging:
                os.replace(staging, home)
            else:
                shutil.move(str(root), str(home))
        except OSError as e:
            raise ToolchainError(f"Failed to move Maven installation to '{home}': {e}")
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    set_executables(home, MAVEN_EXECUTABLES)
    logger.info(f"Maven installed at: {home}")


def init_bundled_maven(settings: Optional[Dict[str, Any]] = None) -> Path:
    """
    Make sure the provisioned Maven installation exists.

    Returns:
        The Maven home directory

    Raises:
        ToolchainError: if Maven could not be provisioned
    """
    settings = settings if settings is not None else get_toolchain_settings()
    home = maven_home_dir(settings)

    # exists already?
    if home.is_dir():
        logger.debug(f"Reusing Maven installation: {home}")
        return home

    version = settings["maven_version"]
    mode = settings.get("mode", MODE_DOWNLOAD)
    if mode == MODE_BUNDLED:
        archive = settings.get("archive")
        if not archive:
            raise ToolchainError("No Maven archive configured for 'bundled' mode")
        archive = Path(archive).expanduser()
        if not archive.is_file():
            raise ToolchainError(f"Maven archive does not exist: {archive}")
        install_maven(archive, home)
    elif mode == MODE_DOWNLOAD:
        url = settings["download_url"].format(version=version)
        with tempfile.TemporaryDirectory(prefix="jarstrap-") as tmp:
            archive = download_archive(url, Path(tmp) / f"apache-maven-{version}-bin.zip")
            install_maven(archive, home)
    else:
        raise ToolchainError(f"Unknown Maven provisioning mode: {mode}")

    return home


def default_java_home() -> Optional[Path]:
    """Determine Java from JAVA_HOME or the java executable on the PATH."""
    env_home = os.getenv("JAVA_HOME")
    if env_home:
        return Path(env_home)
    java = shutil.which("java")
    if java is None:
        return None
    # .../bin/java -> ...
    return Path(java).resolve().parent.parent


def _check_dir(path: Path, label: str) -> None:
    if not path.exists():
        raise ToolchainError(f"{label} does not exist: {path}")
    if not path.is_dir():
        raise ToolchainError(f"{label} is not a directory: {path}")


def resolve_toolchain(
    config: BuildConfiguration,
    settings: Optional[Dict[str, Any]] = None,
) -> ResolvedToolchain:
    """
    Determine the Maven and Java homes to use.

    Raises:
        ToolchainError: if either home is missing or not a directory
    """
    if config.maven_home is None:
        maven_home = init_bundled_maven(settings)
    else:
        maven_home = Path(config.maven_home)
    _check_dir(maven_home, "Maven home")

    if config.java_home is None:
        java_home = default_java_home()
        if java_home is None:
            raise ToolchainError("No Java home supplied and none found via JAVA_HOME or PATH")
    else:
        java_home = Path(config.java_home)
    _check_dir(java_home, "Java home")

    logger.info(f"Using Maven home {maven_home} and Java home {java_home}")
    return ResolvedToolchain(maven_home=maven_home.absolute(), java_home=java_home.absolute())
