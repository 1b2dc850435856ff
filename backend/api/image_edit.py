from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from typing import Optional

from config.settings import settings
from core.errors import ImageEditError
from core.image_utils import read_upload, decode_payload, build_download_filename
from core.session import get_session_controller
from models.image_edit import (
    SessionState,
    SessionStatus,
    SessionView,
    SessionResponse,
    ImageSelectionView,
    PromptPayload,
    SubmitPayload,
    ConfigStatusResponse,
    SuggestionsResponse,
)
from services.session_controller import SessionController

router = APIRouter(prefix="/image-edit", tags=["image-edit"])

SUGGESTIONS = [
    "Remove the background completely",
    "Make the background a professional white studio",
    "Add a soft vintage filter",
    "Turn this into a pencil sketch",
    "Remove the text from the image",
    "Make the lighting more dramatic"
]

def to_session_view(state: SessionState) -> SessionView:
    """Render a session snapshot for the browser"""
    image_view = None
    if state.image is not None:
        image_view = ImageSelectionView(
            filename=state.image.filename,
            mime_type=state.image.mime_type,
            size_bytes=len(state.image.raw_bytes),
            preview_url=state.image.preview_url
        )

    has_result = state.status == SessionStatus.SUCCESS and state.result is not None
    return SessionView(
        status=state.status,
        prompt=state.prompt,
        image=image_view,
        result_url=f"{settings.API_V1_STR}{router.prefix}/session/result" if has_result else None,
        download_url=f"{settings.API_V1_STR}{router.prefix}/session/result/download" if has_result else None,
        error=state.error,
        can_submit=state.can_submit
    )

def session_response(state: SessionState, started: Optional[bool] = None) -> SessionResponse:
    return SessionResponse(success=True, session=to_session_view(state), started=started)

@router.get("/session", response_model=SessionResponse)
async def get_session(controller: SessionController = Depends(get_session_controller)):
    """Get the current edit session"""
    return session_response(controller.state)

@router.post("/session/image", response_model=SessionResponse)
async def select_image(
    image: UploadFile = File(...),
    controller: SessionController = Depends(get_session_controller)
):
    """Upload the image to edit. Non-image files are rejected without touching the session."""
    try:
        selection = await read_upload(image, settings.MAX_UPLOAD_SIZE)
    except ImageEditError as e:
        print(f"❌ Rejected upload {image.filename}: {e.message}")
        return SessionResponse(success=False, session=to_session_view(controller.state), error=e.message)

    return session_response(controller.select_image(selection))

@router.put("/session/prompt", response_model=SessionResponse)
async def set_prompt(payload: PromptPayload, controller: SessionController = Depends(get_session_controller)):
    """Update the edit instruction"""
    return session_response(controller.set_prompt(payload.prompt))

@router.post("/session/submit", response_model=SessionResponse)
async def submit_edit(
    background_tasks: BackgroundTasks,
    payload: Optional[SubmitPayload] = None,
    controller: SessionController = Depends(get_session_controller)
):
    """Start an edit. The browser polls /session until the status leaves loading."""
    ticket = controller.begin_submit(payload.prompt if payload else None)
    if ticket is None:
        return session_response(controller.state, started=False)

    background_tasks.add_task(controller.complete_submit, ticket)
    return session_response(controller.state, started=True)

@router.post("/session/reset", response_model=SessionResponse)
async def reset_session(controller: SessionController = Depends(get_session_controller)):
    """Start over: clear image, prompt, result and error"""
    return session_response(controller.reset())

@router.get("/session/preview/{token}")
async def get_preview(token: str, controller: SessionController = Depends(get_session_controller)):
    """Serve the original image while it is still the current selection"""
    image = controller.state.image
    if image is None or image.preview_token != token:
        raise HTTPException(status_code=404, detail="Preview not found")

    return Response(
        content=image.raw_bytes,
        media_type=image.mime_type,
        headers={"Cache-Control": "no-store"}
    )

def _result_bytes(controller: SessionController):
    state = controller.state
    if state.status != SessionStatus.SUCCESS or state.result is None:
        raise HTTPException(status_code=404, detail="No edited image available")
    try:
        return decode_payload(state.result.encoded_payload), state.result.mime_type
    except ImageEditError as e:
        raise HTTPException(status_code=500, detail=e.message)

@router.get("/session/result")
async def get_result(controller: SessionController = Depends(get_session_controller)):
    """Serve the edited image for display"""
    content, media_type = _result_bytes(controller)
    return Response(content=content, media_type=media_type, headers={"Cache-Control": "no-store"})

@router.get("/session/result/download")
async def download_result(controller: SessionController = Depends(get_session_controller)):
    """Download the edited image with a timestamped filename"""
    content, media_type = _result_bytes(controller)
    filename = build_download_filename()
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions():
    """Prompt ideas shown under the instruction box"""
    return SuggestionsResponse(suggestions=SUGGESTIONS)

@router.get("/health", response_model=ConfigStatusResponse)
async def check_gemini_config(controller: SessionController = Depends(get_session_controller)):
    """Check if the Gemini API key is configured"""
    has_key = controller.gemini_service.is_configured()

    return ConfigStatusResponse(
        configured=has_key,
        model=controller.gemini_service.model,
        message="Gemini API key configured" if has_key else "Gemini API key not set"
    )
