"""
Build Pipeline Module

Provides the fail-fast bootstrap pipeline:
- Fixed step order
- Configuration-driven step selection
- Dry runs
"""

from jarstrap.pipeline.orchestrator import (
    PipelineOrchestrator,
    BuildContext,
    BuildStep,
    BuildResult,
    StepStatus,
    run_pipeline,
)

__all__ = [
    "PipelineOrchestrator",
    "BuildContext",
    "BuildStep",
    "BuildResult",
    "StepStatus",
    "run_pipeline",
]
