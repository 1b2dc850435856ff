from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from enum import Enum

RESULT_MIME_TYPE = "image/png"

class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

class ImageSelection(BaseModel):
    """An image the user picked, already encoded for transmission"""
    model_config = ConfigDict(frozen=True)

    raw_bytes: bytes
    filename: str
    mime_type: str
    data_url: str
    encoded_payload: str  # base64 without the data URI prefix
    preview_token: str

    @property
    def preview_url(self) -> str:
        return f"/api/image-edit/session/preview/{self.preview_token}"

class EditRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    encoded_payload: str
    mime_type: str
    instruction: str

class EditResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    encoded_payload: str  # base64 without prefix
    mime_type: str = RESULT_MIME_TYPE

class SessionState(BaseModel):
    """Single-user session snapshot. Transitions produce new instances."""
    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.IDLE
    image: Optional[ImageSelection] = None
    prompt: str = ""
    result: Optional[EditResult] = None
    error: Optional[str] = None
    generation: int = 0

    @property
    def can_submit(self) -> bool:
        return (
            self.image is not None
            and bool(self.prompt.strip())
            and self.status != SessionStatus.LOADING
        )

class PendingEdit(BaseModel):
    """Ticket for an edit that has entered the loading state"""
    model_config = ConfigDict(frozen=True)

    request: EditRequest
    generation: int

# API payloads

class PromptPayload(BaseModel):
    prompt: str

class SubmitPayload(BaseModel):
    prompt: Optional[str] = None

class ImageSelectionView(BaseModel):
    filename: str
    mime_type: str
    size_bytes: int
    preview_url: str

class SessionView(BaseModel):
    status: SessionStatus
    prompt: str = ""
    image: Optional[ImageSelectionView] = None
    result_url: Optional[str] = None
    download_url: Optional[str] = None
    error: Optional[str] = None
    can_submit: bool = False

class SessionResponse(BaseModel):
    success: bool
    session: Optional[SessionView] = None
    started: Optional[bool] = None
    error: Optional[str] = None

class ConfigStatusResponse(BaseModel):
    configured: bool
    model: str
    message: str

class SuggestionsResponse(BaseModel):
    suggestions: List[str] = Field(default_factory=list)
