"""
Single-user edit session.

Holds the one SessionState and moves it through idle -> loading -> success/error.
Every transition replaces the state object, so a snapshot handed out by
``state`` never changes under the caller.
"""
from typing import Optional

from core.errors import ImageEditError
from models.image_edit import (
    SessionState,
    SessionStatus,
    ImageSelection,
    EditRequest,
    EditResult,
    PendingEdit,
)
from services.gemini_service import GeminiService

FALLBACK_ERROR_MESSAGE = "Something went wrong during generation."


class SessionController:
    def __init__(self, gemini_service: Optional[GeminiService] = None):
        self.gemini_service = gemini_service or GeminiService()
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    def _transition(self, **changes) -> SessionState:
        self._state = self._state.model_copy(update=changes)
        return self._state

    def select_image(self, selection: ImageSelection) -> SessionState:
        """Replace the current image; any result, error or in-flight edit is dropped"""
        return self._transition(
            status=SessionStatus.IDLE,
            image=selection,
            result=None,
            error=None,
            generation=self._state.generation + 1,
        )

    def set_prompt(self, prompt: str) -> SessionState:
        if self._state.status == SessionStatus.LOADING:
            return self._state
        return self._transition(prompt=prompt)

    def reset(self) -> SessionState:
        """Clear image, prompt, result and error together"""
        self._state = SessionState(generation=self._state.generation + 1)
        return self._state

    def begin_submit(self, prompt: Optional[str] = None) -> Optional[PendingEdit]:
        """
        Enter the loading state if a submission is allowed.

        Args:
            prompt: Optional prompt text to store before submitting

        Returns:
            A PendingEdit ticket, or None when the submit is a no-op
            (already loading, no image, or blank prompt)
        """
        if self._state.status == SessionStatus.LOADING:
            return None

        if prompt is not None:
            self._transition(prompt=prompt)

        state = self._state
        if state.image is None or not state.prompt.strip():
            return None

        generation = state.generation + 1
        self._transition(
            status=SessionStatus.LOADING,
            result=None,
            error=None,
            generation=generation,
        )
        return PendingEdit(
            request=EditRequest(
                encoded_payload=state.image.encoded_payload,
                mime_type=state.image.mime_type,
                instruction=state.prompt,
            ),
            generation=generation,
        )

    def _is_current(self, ticket: PendingEdit) -> bool:
        return (
            self._state.generation == ticket.generation
            and self._state.status == SessionStatus.LOADING
        )

    async def complete_submit(self, ticket: PendingEdit) -> SessionState:
        """Run the edit for a ticket and apply the outcome unless it went stale"""
        request = ticket.request
        try:
            encoded = await self.gemini_service.edit_image(
                request.encoded_payload,
                request.mime_type,
                request.instruction,
            )
        except ImageEditError as e:
            return self._finish(ticket, error=e.message)
        except Exception as e:
            print(f"❌ Unexpected error during edit: {e}")
            return self._finish(ticket, error=str(e) or FALLBACK_ERROR_MESSAGE)

        return self._finish(ticket, result=EditResult(encoded_payload=encoded))

    def _finish(self, ticket: PendingEdit, result: Optional[EditResult] = None, error: Optional[str] = None) -> SessionState:
        if not self._is_current(ticket):
            print(f"🔍 Discarding stale edit response (generation {ticket.generation})")
            return self._state

        if error is not None:
            print(f"❌ Edit failed: {error}")
            return self._transition(status=SessionStatus.ERROR, error=error or FALLBACK_ERROR_MESSAGE)

        return self._transition(status=SessionStatus.SUCCESS, result=result)

    async def submit(self, prompt: Optional[str] = None) -> SessionState:
        """Submit and wait for the outcome. A no-op submit returns the unchanged state."""
        ticket = self.begin_submit(prompt)
        if ticket is None:
            return self._state
        return await self.complete_submit(ticket)
