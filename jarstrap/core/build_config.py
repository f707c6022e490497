"""
Build configuration.

The BuildConfiguration is created once per run from the parsed command-line
options and is never modified afterwards. All list-like values are stored
as tuples.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_NAME = "jarstrap-app"
DEFAULT_VERSION = "0.0.1"

# Layout of the build output
OUTPUT_SUBDIR = "output"
LIB_SUBDIR = "lib"
SOURCES_SUBDIR = "sources"
BIN_SUBDIR = "bin"
POM_FILE = "pom.xml"


class ConfigurationError(ValueError):
    """Raised when the supplied configuration is unusable."""


def read_list_file(path: Path, separator: str) -> List[str]:
    """
    Read a list file with one entry per line.

    Blank lines and lines without the separator are ignored.

    Args:
        path: the file to read
        separator: character every valid entry must contain

    Returns:
        The stripped entries in file order
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"List file does not exist: {path}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ConfigurationError(f"Failed to read list file '{path}': {e}")

    result = []
    for line in lines:
        line = line.strip()
        if not line or separator not in line:
            continue
        result.append(line)
    return result


def expand_external(paths: Iterable[Path]) -> List[Path]:
    """
    Turn external jar references into absolute file paths.

    Files are kept, directories are expanded to the jar files they contain.
    """
    result = []
    for path in paths:
        path = Path(path).absolute()
        if path.is_dir():
            jars = sorted(p for p in path.glob("*.jar") if p.is_file())
            if not jars:
                logger.warning(f"No jar files found in directory: {path}")
            result.extend(jars)
        elif path.is_file():
            result.append(path)
        else:
            raise ConfigurationError(f"External jar/directory does not exist: {path}")
    return result


def _existing_file(path: Optional[Path], label: str) -> Optional[Path]:
    if path is None:
        return None
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"{label} does not exist: {path}")
    if path.is_dir():
        raise ConfigurationError(f"{label} points to a directory: {path}")
    return path.absolute()


def _absolute(path: Optional[Path]) -> Optional[Path]:
    if path is None:
        return None
    return Path(path).absolute()


@dataclass(frozen=True)
class BuildConfiguration:
    """Everything a single bootstrap run needs to know."""
    output_dir: Path
    dependencies: Tuple[str, ...] = ()
    exclusions: Tuple[str, ...] = ()
    repositories: Tuple[str, ...] = ()
    external_jars: Tuple[Path, ...] = ()
    external_sources: Tuple[Path, ...] = ()
    name: str = DEFAULT_NAME
    version: str = DEFAULT_VERSION
    main_class: Optional[str] = None
    jvm_args: Tuple[str, ...] = ()

    # Feature flags
    sources: bool = False
    skip_single_jar: bool = False
    clean: bool = False
    compress_dir_structure: bool = False
    scripts: bool = False
    launch: bool = False

    # OS packages / container image
    debian: bool = False
    debian_snippet: Optional[Path] = None
    redhat: bool = False
    redhat_snippet: Optional[Path] = None
    docker_base_image: Optional[str] = None
    docker_instructions: Optional[Path] = None
    docker: bool = False

    # Toolchain and template overrides
    maven_home: Optional[Path] = None
    maven_user_settings: Optional[Path] = None
    java_home: Optional[Path] = None
    pom_template: Optional[Path] = None

    @property
    def skip_sources(self) -> bool:
        return not self.sources

    @property
    def output_dir_maven(self) -> Path:
        """The directory the build places its artifacts in."""
        root = Path(self.output_dir).absolute()
        if self.compress_dir_structure:
            return root
        return root / OUTPUT_SUBDIR

    @property
    def lib_dir(self) -> Path:
        return self.output_dir_maven / LIB_SUBDIR

    @property
    def sources_dir(self) -> Path:
        return self.output_dir_maven / SOURCES_SUBDIR

    @property
    def bin_dir(self) -> Path:
        return self.output_dir_maven / BIN_SUBDIR

    @property
    def pom_file(self) -> Path:
        return Path(self.output_dir).absolute() / POM_FILE

    @property
    def packaging(self) -> str:
        return "pom" if self.skip_single_jar else "jar"

    @property
    def os_packages(self) -> bool:
        return self.debian or self.redhat

    @classmethod
    def from_namespace(cls, ns: Any) -> "BuildConfiguration":
        """
        Build the configuration from parsed command-line options.

        Raises:
            ConfigurationError: if a referenced file or directory is unusable
        """
        dependencies = list(ns.dependencies or [])
        for path in ns.dependency_files or []:
            dependencies.extend(read_list_file(path, ":"))
        exclusions = list(ns.exclusions or [])
        for path in ns.exclusion_files or []:
            exclusions.extend(read_list_file(path, ":"))
        repositories = list(ns.repositories or [])
        for path in ns.repository_files or []:
            repositories.extend(read_list_file(path, ";"))

        if not dependencies:
            raise ConfigurationError("No dependencies supplied (use --dependency or --dependency_file)")

        return cls(
            output_dir=Path(ns.output_dir).absolute(),
            dependencies=tuple(dependencies),
            exclusions=tuple(exclusions),
            repositories=tuple(repositories),
            external_jars=tuple(expand_external(ns.external_jars or [])),
            external_sources=tuple(expand_external(ns.external_sources or [])),
            name=ns.name or DEFAULT_NAME,
            version=ns.version or DEFAULT_VERSION,
            main_class=ns.main_class or None,
            jvm_args=tuple(ns.jvm or []),
            sources=bool(ns.sources),
            skip_single_jar=bool(ns.no_spring_boot),
            clean=bool(ns.clean),
            compress_dir_structure=bool(ns.compress_dir_structure),
            scripts=bool(ns.scripts),
            launch=bool(ns.launch),
            debian=bool(ns.deb),
            debian_snippet=_existing_file(ns.deb_snippet, "Debian snippet"),
            redhat=bool(ns.rpm),
            redhat_snippet=_existing_file(ns.rpm_snippet, "RPM snippet"),
            docker_base_image=ns.docker_base_image or None,
            docker_instructions=_existing_file(ns.docker_instructions, "Docker instructions"),
            docker=bool(ns.docker),
            maven_home=_absolute(ns.maven_home),
            maven_user_settings=_existing_file(ns.maven_user_settings, "Maven user settings"),
            java_home=_absolute(ns.java_home),
            pom_template=_existing_file(ns.pom_template, "pom.xml template"),
        )
