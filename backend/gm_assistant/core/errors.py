"""Error taxonomy for NPC chat turns.

Every error carries the HTTP status it maps to and a short machine code, so
the API layer can render all of them through one exception handler.
"""

from enum import Enum


class GMAssistantError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ChatValidationError(GMAssistantError):
    """Missing or blank turn input."""
    status_code = 400
    code = "validation_error"


class NPCNotFoundError(GMAssistantError):
    status_code = 404
    code = "npc_not_found"

    def __init__(self, npc_id: str):
        super().__init__(f"NPC not found: {npc_id}")
        self.npc_id = npc_id


class GenerationNotConfiguredError(GMAssistantError):
    status_code = 500
    code = "generation_not_configured"


class GenerationErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission_denied"
    QUOTA_EXHAUSTED = "quota_exhausted"
    MODEL_UNAVAILABLE = "model_unavailable"
    EMPTY_RESPONSE = "empty_response"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_GENERATION_STATUS = {
    GenerationErrorKind.UNAUTHENTICATED: 401,
    GenerationErrorKind.PERMISSION_DENIED: 403,
    GenerationErrorKind.QUOTA_EXHAUSTED: 429,
    GenerationErrorKind.MODEL_UNAVAILABLE: 404,
    GenerationErrorKind.EMPTY_RESPONSE: 500,
    GenerationErrorKind.TIMEOUT: 504,
    GenerationErrorKind.UNKNOWN: 502,
}

_GENERATION_MESSAGES = {
    GenerationErrorKind.UNAUTHENTICATED: "The text generation API key was rejected.",
    GenerationErrorKind.PERMISSION_DENIED: "The API key is not allowed to use this model.",
    GenerationErrorKind.QUOTA_EXHAUSTED: "The text generation quota is exhausted. Please try again later.",
    GenerationErrorKind.MODEL_UNAVAILABLE: "The configured model is not available.",
    GenerationErrorKind.EMPTY_RESPONSE: "The model returned an empty reply. Please try again.",
    GenerationErrorKind.TIMEOUT: "The model did not answer in time. Please try again.",
    GenerationErrorKind.UNKNOWN: "Text generation failed. Please try again.",
}


class GenerationError(GMAssistantError):
    """The generation backend failed or returned unusable output."""

    def __init__(self, kind: GenerationErrorKind, message: str | None = None):
        super().__init__(message or _GENERATION_MESSAGES[kind])
        self.kind = kind

    @property
    def status_code(self) -> int:
        return _GENERATION_STATUS[self.kind]

    @property
    def code(self) -> str:
        return f"generation_{self.kind.value}"


class CompactionError(GMAssistantError):
    """Summarization failed; recovered inside the turn, never surfaced."""
    code = "compaction_failed"


class PersistenceError(GMAssistantError):
    status_code = 500
    code = "persistence_error"


class TurnInProgressError(GMAssistantError):
    status_code = 409
    code = "turn_in_progress"

    def __init__(self, npc_id: str):
        super().__init__(f"Another conversation turn is still running for NPC {npc_id}")
        self.npc_id = npc_id
