"""
Orchestration of the image-then-page generation cycle.

This module sequences the two generation calls, tracks the explicit
generation state, and owns the lifecycle of the preview artifact URL.
"""

from landing_gen.orchestration.artifact_store import ArtifactStore
from landing_gen.orchestration.orchestrator import (
    FAILURE_MESSAGE,
    Orchestrator,
    substitute_placeholder,
)
from landing_gen.orchestration.state import (
    Failed,
    GeneratingImage,
    GeneratingPage,
    GenerationPhase,
    GenerationState,
    Idle,
    PreviewSnapshot,
    Ready,
)

__all__ = [
    "ArtifactStore",
    "FAILURE_MESSAGE",
    "Orchestrator",
    "substitute_placeholder",
    "Failed",
    "GeneratingImage",
    "GeneratingPage",
    "GenerationPhase",
    "GenerationState",
    "Idle",
    "PreviewSnapshot",
    "Ready",
]
