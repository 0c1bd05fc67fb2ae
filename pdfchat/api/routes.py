"""Session endpoints.

Thin HTTP surface over the session controller: read a snapshot or invoke
one of its operations. Every operation answers with the resulting snapshot.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from pdfchat.models.schemas import MessageRequest, SessionSnapshot, UploadRequest
from pdfchat.registry.client import RegistryError
from pdfchat.session.controller import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


def get_session(request: Request) -> SessionController:
    """Resolve the live session owned by the application.

    Raises:
        HTTPException: 503 while no session is running.
    """
    session = request.app.state.session
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session is not running",
        )
    return session


@router.get("", response_model=SessionSnapshot)
async def read_session(session: SessionController = Depends(get_session)) -> SessionSnapshot:
    """Return the current session state."""
    return session.snapshot()


@router.post("/upload", response_model=SessionSnapshot)
async def upload_document(
    payload: UploadRequest,
    session: SessionController = Depends(get_session),
) -> SessionSnapshot:
    """Ingest a document link and activate it.

    A failed ingestion is not an HTTP error: the snapshot reports status
    "error" and returns to "idle" on its own.

    Raises:
        422: The link is not a well-formed absolute URL.
    """
    try:
        await session.upload_document(payload.url)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    return session.snapshot()


@router.post("/messages", response_model=SessionSnapshot)
async def send_message(
    payload: MessageRequest,
    session: SessionController = Depends(get_session),
) -> SessionSnapshot:
    """Send a chat turn to the active document's conversation.

    Raises:
        409: No document is ready for chat.
    """
    if not await session.send_message(payload.message):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No document is ready for chat",
        )
    return session.snapshot()


@router.post("/documents/{document_id}/activate", response_model=SessionSnapshot)
async def activate_document(
    document_id: str,
    session: SessionController = Depends(get_session),
) -> SessionSnapshot:
    """Switch the active document, restoring its conversation.

    Raises:
        404: The document is not in the session's document list.
    """
    if not session.switch_active_document(document_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown document {document_id}",
        )
    return session.snapshot()


@router.delete("/documents/{document_id}", response_model=SessionSnapshot)
async def delete_document(
    document_id: str,
    session: SessionController = Depends(get_session),
) -> SessionSnapshot:
    """Delete a document and its conversation.

    Raises:
        502: The registry rejected the deletion.
    """
    try:
        await session.delete_document(document_id)
    except RegistryError as e:
        logger.warning(f"Delete of document {document_id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e
    return session.snapshot()


@router.post("/reset", response_model=SessionSnapshot)
async def reset_conversation(session: SessionController = Depends(get_session)) -> SessionSnapshot:
    """Clear the active conversation and start a new one."""
    session.reset_conversation()
    return session.snapshot()
