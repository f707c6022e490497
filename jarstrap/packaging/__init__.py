"""
Packaging stages that run around the Maven build:
- launch scripts (shell/batch)
- Debian/RPM package inputs
- Dockerfile
- launching the main class
"""

from jarstrap.packaging.docker import create_docker_files
from jarstrap.packaging.launch import launch_main_class
from jarstrap.packaging.ospackage import create_debian_files, create_redhat_files
from jarstrap.packaging.scripts import create_scripts

__all__ = [
    "create_docker_files",
    "launch_main_class",
    "create_debian_files",
    "create_redhat_files",
    "create_scripts",
]
