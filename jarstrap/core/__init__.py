"""
Core building blocks of the bootstrap pipeline.

Modules:
    build_config: the immutable per-run configuration
    template: pom.xml template rendering
    toolchain: locating/provisioning Maven and Java
    maven: running the Maven build
    zip_utils: archive extraction
    process: child processes with streamed output
    result: stage results
"""

from jarstrap.core.build_config import BuildConfiguration, ConfigurationError
from jarstrap.core.result import StageResult
from jarstrap.core.template import (
    Placeholder,
    RenderedDescriptor,
    TemplateError,
    configure_bundled_template,
    configure_template,
)
from jarstrap.core.toolchain import ResolvedToolchain, ToolchainError, resolve_toolchain

__all__ = [
    "BuildConfiguration",
    "ConfigurationError",
    "StageResult",
    "Placeholder",
    "RenderedDescriptor",
    "TemplateError",
    "configure_bundled_template",
    "configure_template",
    "ResolvedToolchain",
    "ToolchainError",
    "resolve_toolchain",
]
