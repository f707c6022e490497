"""
jarstrap - bootstrap runnable applications from Maven dependencies.

Renders a pom.xml from a list of dependency coordinates, lets Maven pull in
and package the artifacts, then generates launch scripts, Debian/RPM package
inputs and a Dockerfile.
"""

__version__ = "0.1.0"
