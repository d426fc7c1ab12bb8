"""
Generation state variants.

Exactly one variant describes the orchestrator at any time. Each variant only
carries the data that is meaningful in that phase, so combinations such as
"loading with an error" cannot be expressed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from landing_gen.models import GeneratedArtifact


class GenerationPhase(str, Enum):
    """Phases of a generation cycle."""
    IDLE = "idle"
    GENERATING_IMAGE = "generating_image"
    GENERATING_PAGE = "generating_page"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Idle:
    phase: GenerationPhase = field(default=GenerationPhase.IDLE, init=False)


@dataclass(frozen=True, eq=False)
class GeneratingImage:
    cycle: int
    phase: GenerationPhase = field(default=GenerationPhase.GENERATING_IMAGE, init=False)


@dataclass(frozen=True, eq=False)
class GeneratingPage:
    cycle: int
    image_data_uri: str = field(repr=False)
    phase: GenerationPhase = field(default=GenerationPhase.GENERATING_PAGE, init=False)


@dataclass(frozen=True)
class Ready:
    artifact: GeneratedArtifact
    phase: GenerationPhase = field(default=GenerationPhase.READY, init=False)


@dataclass(frozen=True)
class Failed:
    reason: str
    phase: GenerationPhase = field(default=GenerationPhase.FAILED, init=False)


GenerationState = Union[Idle, GeneratingImage, GeneratingPage, Ready, Failed]


@dataclass(frozen=True)
class PreviewSnapshot:
    """What the preview renderer needs to draw the current state."""
    phase: GenerationPhase
    artifact_url: Optional[str] = None
    error_message: Optional[str] = None
    image_data_uri: Optional[str] = field(default=None, repr=False)

    @property
    def is_loading(self) -> bool:
        return self.phase in (GenerationPhase.GENERATING_IMAGE, GenerationPhase.GENERATING_PAGE)
