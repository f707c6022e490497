"""
Access to the resources bundled with the package.
"""

from __future__ import annotations

import shutil
from importlib import resources
from pathlib import Path

LOCATION = "jarstrap.resources"

TEMPLATE_FILE = "template.xml"
DEBIAN_SNIPPET_FILE = "deb.xml"
REDHAT_SNIPPET_FILE = "rpm.xml"


def read_resource(name: str) -> str:
    """Return the text of a bundled resource."""
    return resources.files(LOCATION).joinpath(name).read_text(encoding="utf-8")


def copy_resource_to(name: str, output_dir: Path) -> Path:
    """
    Copy a bundled resource into a directory.

    Returns:
        The path of the copy
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / name
    with resources.as_file(resources.files(LOCATION).joinpath(name)) as source:
        shutil.copyfile(source, target)
    return target
