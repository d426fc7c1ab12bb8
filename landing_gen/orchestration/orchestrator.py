"""
Orchestrator for the image-then-page generation cycle.

A cycle runs: release previous artifact -> GeneratingImage -> GeneratingPage
-> Ready, or Failed on any error. The two service calls are strictly
sequential because the page needs the real image to replace the placeholder.

There is no cancellation. A call that completes after the orchestrator has
moved on (reset, or a newer submit) is discarded.
"""

import logging
from typing import Any, Callable, Optional

from landing_gen.errors import GenerationError, TransportError, ValidationError
from landing_gen.io.image_loader import encode_data_uri
from landing_gen.models import BusinessFormData, GeneratedArtifact
from landing_gen.orchestration.artifact_store import ArtifactStore
from landing_gen.orchestration.state import (
    Failed,
    GeneratingImage,
    GeneratingPage,
    GenerationState,
    Idle,
    PreviewSnapshot,
    Ready,
)

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Something went wrong while generating your page. Please try again."

StateListener = Callable[[GenerationState], None]


def substitute_placeholder(html: str, placeholder: str, image_data_uri: str) -> str:
    """Replace every occurrence of the placeholder with the image data URI."""
    if not placeholder:
        return html
    return html.replace(placeholder, image_data_uri)


class Orchestrator:
    """Drives one session's generation cycles and owns its artifact URL."""

    def __init__(
        self,
        client: Any,
        store: Optional[ArtifactStore] = None,
        on_change: Optional[StateListener] = None,
        failure_message: str = FAILURE_MESSAGE,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Generation client exposing ``generate_illustrative_image``,
                ``generate_landing_page_html`` and ``placeholder_token``.
            store: Artifact store for preview URLs.
            on_change: Called with the new state after every transition.
            failure_message: User-facing message for the Failed state.
        """
        self.client = client
        self.store = store if store is not None else ArtifactStore()
        self.on_change = on_change
        self.failure_message = failure_message
        self._state: GenerationState = Idle()
        self._cycle = 0

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def artifact(self) -> Optional[GeneratedArtifact]:
        if isinstance(self._state, Ready):
            return self._state.artifact
        return None

    @property
    def artifact_url(self) -> Optional[str]:
        artifact = self.artifact
        return artifact.preview_url if artifact else None

    @property
    def error_message(self) -> Optional[str]:
        if isinstance(self._state, Failed):
            return self._state.reason
        return None

    def snapshot(self) -> PreviewSnapshot:
        """Current state in the shape the preview renderer consumes."""
        image_data_uri = None
        if isinstance(self._state, GeneratingPage):
            image_data_uri = self._state.image_data_uri
        elif isinstance(self._state, Ready):
            image_data_uri = self._state.artifact.image_data_uri

        return PreviewSnapshot(
            phase=self._state.phase,
            artifact_url=self.artifact_url,
            error_message=self.error_message,
            image_data_uri=image_data_uri,
        )

    async def submit(self, data: Any) -> GenerationState:
        """
        Run a full generation cycle for submitted form data.

        Args:
            data: BusinessFormData or a mapping of form fields.

        Returns:
            The state after the cycle (Ready or Failed), or the current state
            if this cycle was superseded while it was in flight.
        """
        self._release_artifact()
        self._cycle += 1
        cycle = self._cycle

        try:
            form = BusinessFormData.coerce(data)
        except ValidationError as e:
            logger.warning("Cycle %d rejected invalid form data: %s", cycle, e)
            self._transition(Failed(reason=self.failure_message))
            return self._state

        pending: GenerationState = GeneratingImage(cycle=cycle)
        self._transition(pending)
        try:
            image_bytes = await self.client.generate_illustrative_image(form)
            image_data_uri = encode_data_uri(image_bytes, "image/png")
        except Exception as e:
            return self._fail(pending, e)
        if not self._is_current(pending):
            return self._state

        pending = GeneratingPage(cycle=cycle, image_data_uri=image_data_uri)
        self._transition(pending)
        try:
            html = await self.client.generate_landing_page_html(form)
        except Exception as e:
            return self._fail(pending, e)
        if not self._is_current(pending):
            return self._state

        try:
            final_html = substitute_placeholder(html, self.client.placeholder_token, image_data_uri)
        except Exception as e:
            return self._fail(pending, e)
        preview_url = self.store.create_url(final_html)
        artifact = GeneratedArtifact(
            image_data_uri=image_data_uri,
            html=final_html,
            preview_url=preview_url,
        )
        self._transition(Ready(artifact=artifact))
        return self._state

    def reset(self):
        """Release the current artifact and return to Idle."""
        self._release_artifact()
        self._cycle += 1
        self._transition(Idle())

    def close(self):
        """Tear down the session; nothing stays allocated afterwards."""
        self.reset()
        leaked = self.store.release_all()
        if leaked:
            logger.warning("Released %d preview URL(s) left in the store on close", leaked)

    def _is_current(self, pending: GenerationState) -> bool:
        if self._state is pending and getattr(pending, "cycle", None) == self._cycle:
            return True
        logger.debug("Discarding stale result for cycle %s", getattr(pending, "cycle", "?"))
        return False

    def _fail(self, pending: GenerationState, error: Exception) -> GenerationState:
        if not self._is_current(pending):
            return self._state

        if isinstance(error, TransportError):
            kind = "transport"
        elif isinstance(error, GenerationError):
            kind = "generation"
        elif isinstance(error, ValidationError):
            kind = "validation"
        else:
            kind = "unexpected"
        logger.error(
            "Cycle %d failed during %s (%s error): %s",
            self._cycle, pending.phase.value, kind, error,
            exc_info=kind == "unexpected",
        )
        self._transition(Failed(reason=self.failure_message))
        return self._state

    def _release_artifact(self):
        if isinstance(self._state, Ready):
            self.store.release_url(self._state.artifact.preview_url)

    def _transition(self, state: GenerationState):
        logger.info("Generation state: %s -> %s", self._state.phase.value, state.phase.value)
        self._state = state
        if self.on_change is None:
            return
        try:
            self.on_change(state)
        except Exception:
            # Listener errors never interrupt a cycle.
            logger.exception("State listener failed on %s", state.phase.value)
