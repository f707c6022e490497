"""
Pipeline Orchestrator

Runs the bootstrap of a Maven application as an ordered sequence of steps:
- Resolve Maven/Java homes (provisioning Maven if needed)
- Prepare the output directory
- Write OS package launch scripts (needed by the build's packaging goals)
- Render the pom.xml template
- Run Maven
- Write launch scripts and the Dockerfile
- Launch the main class

The first failing step stops the pipeline; all remaining steps are cancelled.

Usage:
    from jarstrap.pipeline import run_pipeline

    result = run_pipeline(config)
    if result.status != "success":
        print(result.message)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from jarstrap.config import get_toolchain_settings
from jarstrap.core.build_config import BuildConfiguration
from jarstrap.core.maven import execute_maven
from jarstrap.core.result import StageResult
from jarstrap.core.template import (
    RenderedDescriptor,
    TemplateError,
    configure_bundled_template,
    configure_template,
)
from jarstrap.core.toolchain import ResolvedToolchain, ToolchainError, resolve_toolchain
from jarstrap.packaging.docker import create_docker_files
from jarstrap.packaging.launch import launch_main_class
from jarstrap.packaging.ospackage import create_debian_files, create_redhat_files
from jarstrap.packaging.scripts import create_scripts

logger = logging.getLogger(__name__)


class StepStatus(Enum):
    """Status of a build step."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@dataclass
class BuildContext:
    """State shared by the steps of one run."""
    config: BuildConfiguration
    settings: Dict[str, Any]
    dry_run: bool = False
    toolchain: Optional[ResolvedToolchain] = None
    descriptor: Optional[RenderedDescriptor] = None


@dataclass
class BuildStep:
    """A single step in the build pipeline."""
    name: str
    action: Callable[[BuildContext], StageResult]
    enabled: bool = True

    # Runtime state
    status: StepStatus = StepStatus.PENDING
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_seconds: float = 0.0
    error: str = ""


@dataclass
class BuildResult:
    """Result of a full pipeline run."""
    build_id: str
    started_at: str
    completed_at: Optional[str] = None
    duration_seconds: float = 0.0
    status: str = "pending"

    # Step results
    total_steps: int = 0
    steps_succeeded: int = 0
    steps_failed: int = 0
    steps_skipped: int = 0

    # Detailed results
    step_results: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # Errors
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        """The message of the first failure, None if successful."""
        return self.errors[0] if self.errors else None


def resolve_toolchain_step(ctx: BuildContext) -> StageResult:
    try:
        ctx.toolchain = resolve_toolchain(ctx.config, ctx.settings)
    except ToolchainError as e:
        return StageResult.failure(str(e))
    return StageResult.success()


def init_output_dir_step(ctx: BuildContext) -> StageResult:
    output_dir = Path(ctx.config.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return StageResult.failure(f"Failed to create output directory: {output_dir}: {e}")
    if not output_dir.is_dir():
        return StageResult.failure(f"Output directory is not a directory: {output_dir}")
    return StageResult.success()


def render_descriptor_step(ctx: BuildContext) -> StageResult:
    try:
        if ctx.config.pom_template is None:
            ctx.descriptor = configure_bundled_template(ctx.config)
        else:
            ctx.descriptor = configure_template(ctx.config.pom_template, ctx.config)
    except TemplateError as e:
        return StageResult.failure(str(e))
    return StageResult.success()


def build_step(ctx: BuildContext) -> StageResult:
    return execute_maven(ctx.config, ctx.toolchain, ctx.descriptor, dry_run=ctx.dry_run)


def launch_step(ctx: BuildContext) -> StageResult:
    return launch_main_class(ctx.config, ctx.toolchain, dry_run=ctx.dry_run)


class PipelineOrchestrator:
    """
    Orchestrates the bootstrap of an application.

    Features:
    - Fixed, strictly sequential step order
    - Steps switched on/off by the build configuration
    - Fail-fast: the first failure cancels all remaining steps
    - Dry runs (no Maven, no launch)
    """

    def __init__(
        self,
        config: BuildConfiguration,
        settings: Optional[Dict[str, Any]] = None,
        dry_run: bool = False,
    ):
        self.config = config
        self.settings = settings
        self.dry_run = dry_run

    def _build_steps(self) -> List[BuildStep]:
        """Build the step sequence for the configuration."""
        config = self.config
        return [
            BuildStep("resolve_toolchain", resolve_toolchain_step),
            BuildStep("init_output_dir", init_output_dir_step),
            # OS package launch scripts are inputs of the build's packaging goals
            BuildStep("debian_launch_script", lambda ctx: create_debian_files(ctx.config), config.debian),
            BuildStep("redhat_launch_script", lambda ctx: create_redhat_files(ctx.config), config.redhat),
            BuildStep("render_descriptor", render_descriptor_step),
            BuildStep("build", build_step),
            BuildStep("launch_scripts", lambda ctx: create_scripts(ctx.config), config.scripts),
            BuildStep("docker", lambda ctx: create_docker_files(ctx.config), config.docker),
            BuildStep("launch", launch_step, config.launch),
        ]

    def _run_step(self, step: BuildStep, ctx: BuildContext) -> bool:
        """
        Execute a single build step.

        Returns:
            True if successful, False otherwise
        """
        step.status = StepStatus.RUNNING
        step.start_time = datetime.now()
        logger.info(f"Running step: {step.name}")

        try:
            result = step.action(ctx)
        except Exception as e:
            logger.error(f"Step {step.name} failed with exception: {e}")
            result = StageResult.failure(f"Step {step.name} failed: {e}")

        if result.ok:
            step.status = StepStatus.SUCCESS
            logger.debug(f"Step {step.name} completed successfully")
        else:
            step.status = StepStatus.FAILED
            step.error = result.message or "unknown error"
            logger.error(f"Step {step.name} failed: {step.error}")

        step.end_time = datetime.now()
        step.duration_seconds = (step.end_time - step.start_time).total_seconds()
        return step.status == StepStatus.SUCCESS

    def run(self) -> BuildResult:
        """
        Run the pipeline.

        Returns:
            BuildResult with detailed results
        """
        build_id = f"build_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        result = BuildResult(
            build_id=build_id,
            started_at=datetime.now().isoformat()
        )

        logger.info(f"Starting build: {build_id}")

        settings = self.settings if self.settings is not None else get_toolchain_settings()
        ctx = BuildContext(config=self.config, settings=settings, dry_run=self.dry_run)
        steps = self._build_steps()
        result.total_steps = len(steps)

        failed = False
        for step in steps:
            if failed:
                step.status = StepStatus.CANCELLED
                result.step_results[step.name] = {"status": step.status.value}
                continue

            if not step.enabled:
                step.status = StepStatus.SKIPPED
                result.steps_skipped += 1
                result.step_results[step.name] = {"status": step.status.value}
                logger.debug(f"Skipping disabled step: {step.name}")
                continue

            success = self._run_step(step, ctx)
            result.step_results[step.name] = {
                "status": step.status.value,
                "duration": step.duration_seconds,
            }

            if success:
                result.steps_succeeded += 1
            else:
                result.steps_failed += 1
                result.errors.append(step.error)
                failed = True

        result.status = "failed" if failed else "success"

        # Finalize result
        result.completed_at = datetime.now().isoformat()
        started = datetime.fromisoformat(result.started_at)
        completed = datetime.fromisoformat(result.completed_at)
        result.duration_seconds = (completed - started).total_seconds()

        logger.info(
            f"Build {build_id} completed: {result.status} "
            f"({result.steps_succeeded} succeeded, {result.steps_failed} failed, "
            f"{result.steps_skipped} skipped)"
        )

        return result


def run_pipeline(
    config: BuildConfiguration,
    settings: Optional[Dict[str, Any]] = None,
    dry_run: bool = False,
) -> BuildResult:
    """Run the bootstrap pipeline."""
    orchestrator = PipelineOrchestrator(config, settings=settings, dry_run=dry_run)
    return orchestrator.run()
