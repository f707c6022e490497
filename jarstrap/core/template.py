"""
Build descriptor (pom.xml) templates.

A template is an ordinary pom.xml that contains placeholder markers such as
``<!-- dependencies -->``. Rendering replaces every known marker with a value
computed from the BuildConfiguration. Unknown markers and ordinary XML
comments are left alone.
"""

from __future__ import annotations

import logging
import re
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional
from xml.sax.saxutils import escape

from jarstrap.core import resources
from jarstrap.core.build_config import BuildConfiguration

logger = logging.getLogger(__name__)

# only lines containing this are candidates for substitution
MARKER_PREFIX = "<!-- "

EXTERNAL_GROUP_ID = "jarstrap.external"
EXTERNAL_VERSION = "1.0"
SOURCES_CLASSIFIER = "sources"


class TemplateError(Exception):
    """Raised when a template cannot be read or the descriptor cannot be written."""


class Placeholder(Enum):
    """The markers recognized in a template."""
    DEPENDENCIES = "<!-- dependencies -->"
    EXCLUSIONS = "<!-- exclusions -->"
    REPOSITORIES = "<!-- repositories -->"
    OUTPUT_DIR = "<!-- outputdir -->"
    NO_SOURCES = "<!-- nosources -->"
    NO_SPRING_BOOT = "<!-- nospringboot -->"
    MAIN_CLASS = "<!-- mainclass -->"
    PACKAGING = "<!-- packaging -->"
    NAME = "<!-- name -->"
    VERSION = "<!-- version -->"
    PLUGINS = "<!-- plugins -->"


_MARKER_PATTERN = re.compile("|".join(re.escape(p.value) for p in Placeholder))


@dataclass(frozen=True)
class RenderedDescriptor:
    """A rendered pom.xml and the directory its build writes artifacts to."""
    pom_file: Path
    output_dir_maven: Path
    modified: bool = True


def _indent(lines: List[str], level: int) -> List[str]:
    return [("  " * level) + line for line in lines]


def split_exclusion(exclusion: str) -> Optional[List[str]]:
    """Split a group:artifact pair, None if malformed."""
    parts = exclusion.split(":")
    if len(parts) != 2:
        return None
    return parts


def split_dependency(dependency: str) -> Optional[List[str]]:
    """Split a group:artifact:version triple, None if malformed."""
    parts = dependency.split(":")
    if len(parts) != 3:
        return None
    return parts


def _exclusion_lines(config: BuildConfiguration) -> List[str]:
    entries = []
    for exclusion in config.exclusions:
        parts = split_exclusion(exclusion)
        if parts is None:
            logger.warning(
                f"Skipping exclusion as it does not conform to format 'group:artifact': {exclusion}"
            )
            continue
        entries.extend([
            "  <exclusion>",
            f"    <groupId>{escape(parts[0])}</groupId>",
            f"    <artifactId>{escape(parts[1])}</artifactId>",
            "  </exclusion>",
        ])
    if not entries:
        return []
    return ["<exclusions>"] + entries + ["</exclusions>"]


def render_exclusions(config: BuildConfiguration) -> str:
    """Render the exclusions element (empty string if there are none)."""
    return "\n".join(_indent(_exclusion_lines(config), 3))


def _external_lines(path: Path, classifier: Optional[str]) -> List[str]:
    artifact = path.stem
    if classifier and artifact.endswith(f"-{classifier}"):
        artifact = artifact[: -len(classifier) - 1]
    lines = [
        "<dependency>",
        f"  <groupId>{EXTERNAL_GROUP_ID}</groupId>",
        f"  <artifactId>{escape(artifact)}</artifactId>",
        f"  <version>{EXTERNAL_VERSION}</version>",
    ]
    if classifier:
        lines.append(f"  <classifier>{classifier}</classifier>")
    lines.extend([
        "  <scope>system</scope>",
        f"  <systemPath>{escape(str(path))}</systemPath>",
        "</dependency>",
    ])
    return lines


def render_dependencies(config: BuildConfiguration) -> str:
    """Render the dependencies element, including external jars."""
    if not config.dependencies:
        logger.warning("No dependencies supplied!")

    exclusions = _exclusion_lines(config)
    lines = ["<dependencies>"]
    for dependency in config.dependencies:
        parts = split_dependency(dependency)
        if parts is None:
            logger.warning(
                f"Skipping dependency as it does not conform to format "
                f"'group:artifact:version': {dependency}"
            )
            continue
        entry = [
            "<dependency>",
            f"  <groupId>{escape(parts[0])}</groupId>",
            f"  <artifactId>{escape(parts[1])}</artifactId>",
            f"  <version>{escape(parts[2])}</version>",
        ]
        entry.extend(_indent(exclusions, 1))
        entry.append("</dependency>")
        lines.extend(_indent(entry, 1))
    for path in config.external_jars:
        lines.extend(_indent(_external_lines(path, None), 1))
    for path in config.external_sources:
        lines.extend(_indent(_external_lines(path, SOURCES_CLASSIFIER), 1))
    lines.append("</dependencies>")
    return "\n".join(_indent(lines, 1))


def render_repositories(config: BuildConfiguration) -> str:
    """Render the repositories element (empty string if there are none)."""
    entries = []
    for repository in config.repositories:
        parts = repository.split(";")
        if len(parts) != 3:
            logger.warning(
                f"Skipping repository as it does not conform to format 'id;name;url': {repository}"
            )
            continue
        entries.extend([
            "  <repository>",
            f"    <id>{escape(parts[0])}</id>",
            f"    <name>{escape(parts[1])}</name>",
            f"    <url>{escape(parts[2])}</url>",
            "  </repository>",
        ])
    if not entries:
        return ""
    return "\n".join(_indent(["<repositories>"] + entries + ["</repositories>"], 1))


def _snippet_text(custom: Optional[Path], bundled: str) -> str:
    if custom is not None:
        return Path(custom).read_text(encoding="utf-8")
    return resources.read_resource(bundled)


def render_plugins(config: BuildConfiguration) -> str:
    """
    Render the extra build plugins for the requested OS packages.

    The snippets may use the other markers; these get resolved here.
    """
    snippets = []
    if config.debian:
        snippets.append(_snippet_text(config.debian_snippet, resources.DEBIAN_SNIPPET_FILE))
    if config.redhat:
        snippets.append(_snippet_text(config.redhat_snippet, resources.REDHAT_SNIPPET_FILE))
    values = compute_values(config, exclude={Placeholder.PLUGINS})
    rendered = [substitute(snippet, values).rstrip("\n") for snippet in snippets]
    return "\n".join(rendered)


def _bool(value: bool) -> str:
    return "true" if value else "false"


# Placeholder -> rendering function; None means "leave the marker alone"
RENDERERS: Dict[Placeholder, Callable[[BuildConfiguration], Optional[str]]] = {
    Placeholder.DEPENDENCIES: render_dependencies,
    Placeholder.EXCLUSIONS: render_exclusions,
    Placeholder.REPOSITORIES: render_repositories,
    Placeholder.OUTPUT_DIR: lambda c: str(c.output_dir_maven),
    Placeholder.NO_SOURCES: lambda c: _bool(c.skip_sources),
    Placeholder.NO_SPRING_BOOT: lambda c: _bool(c.skip_single_jar),
    Placeholder.MAIN_CLASS: lambda c: c.main_class,
    Placeholder.PACKAGING: lambda c: c.packaging,
    Placeholder.NAME: lambda c: c.name,
    Placeholder.VERSION: lambda c: c.version,
    Placeholder.PLUGINS: render_plugins,
}


def compute_values(
    config: BuildConfiguration,
    include: Optional[set] = None,
    exclude: Optional[set] = None,
) -> Dict[str, Optional[str]]:
    """Render the requested placeholders, keyed by marker text."""
    values = {}
    for placeholder, renderer in RENDERERS.items():
        if include is not None and placeholder not in include:
            continue
        if exclude is not None and placeholder in exclude:
            continue
        values[placeholder.value] = renderer(config)
    return values


def substitute(text: str, values: Dict[str, Optional[str]]) -> str:
    """Replace all markers in one pass; markers without a value stay."""
    def replace(match):
        value = values.get(match.group(0))
        return match.group(0) if value is None else value
    return _MARKER_PATTERN.sub(replace, text)


def configure_template(template: Path, config: BuildConfiguration) -> RenderedDescriptor:
    """
    Render the specified template into the configured output directory.

    Args:
        template: the template file to render
        config: the build configuration

    Returns:
        The rendered descriptor

    Raises:
        TemplateError: if the template cannot be read or the pom.xml cannot be written
    """
    try:
        with open(template, "r", encoding="utf-8", newline="") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(f"Failed to read template file '{template}': {e}")

    present = set()
    for line in lines:
        if MARKER_PREFIX in line:
            present.update(_MARKER_PATTERN.findall(line))
    try:
        values = compute_values(config, include={Placeholder(m) for m in present})
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(f"Failed to configure template file '{template}': {e}")

    modified = False
    for i, line in enumerate(lines):
        if MARKER_PREFIX not in line:
            continue
        new_line = substitute(line, values)
        if new_line != line:
            lines[i] = new_line
            modified = True

    if not modified:
        logger.warning(f"Template file did not contain any placeholders, not modified: {template}")

    pom_file = config.pom_file
    try:
        with open(pom_file, "w", encoding="utf-8", newline="") as f:
            f.writelines(lines)
    except OSError as e:
        raise TemplateError(f"Failed to write pom.xml '{pom_file}': {e}")

    logger.info(f"Build descriptor written to {pom_file}")
    return RenderedDescriptor(
        pom_file=pom_file,
        output_dir_maven=config.output_dir_maven,
        modified=modified,
    )


def configure_bundled_template(config: BuildConfiguration) -> RenderedDescriptor:
    """Render the template that ships with the package."""
    with tempfile.TemporaryDirectory(prefix="jarstrap-") as tmp:
        try:
            template = resources.copy_resource_to(resources.TEMPLATE_FILE, Path(tmp))
        except OSError as e:
            raise TemplateError(f"Failed to configure bundled template: {e}")
        return configure_template(template, config)
