"""Pydantic models shared by the session layer and its boundaries.

Models:
    - Document: A processed PDF tracked by the remote registry
    - Message / Conversation: Per-document chat history
    - IngestionStatus: Ingestion state machine values
    - IngestionRequest / IngestionResponse: Ingestion webhook payloads
    - ChatTurnRequest: Chat webhook payload
    - SessionSnapshot: Read-only session view for the UI and API
    - UploadRequest / MessageRequest: Session API payloads
"""

from pdfchat.models.schemas import (
    ChatTurnRequest,
    Conversation,
    Document,
    IngestionRequest,
    IngestionResponse,
    IngestionStatus,
    Message,
    MessageRequest,
    MessageRole,
    SessionSnapshot,
    UploadRequest,
    new_identifier,
    validate_document_url,
)

__all__ = [
    "ChatTurnRequest",
    "Conversation",
    "Document",
    "IngestionRequest",
    "IngestionResponse",
    "IngestionStatus",
    "Message",
    "MessageRequest",
    "MessageRole",
    "SessionSnapshot",
    "UploadRequest",
    "new_identifier",
    "validate_document_url",
]
