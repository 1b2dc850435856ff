from typing import Optional

from services.gemini_service import GeminiService
from services.session_controller import SessionController

class SessionStore:
    _instance: Optional[SessionController] = None

    @classmethod
    def get_controller(cls) -> SessionController:
        if cls._instance is None:
            cls._instance = SessionController(GeminiService())
        return cls._instance

# Convenience function used as a FastAPI dependency
def get_session_controller() -> SessionController:
    return SessionStore.get_controller()
