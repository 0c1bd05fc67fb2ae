"""FastAPI endpoints for the PDF chat session.

Endpoints:
    - GET /health: Service health status
    - GET /session: Current session snapshot
    - POST /session/upload: Ingest a document link
    - POST /session/messages: Send a chat turn
    - POST /session/documents/{id}/activate: Switch the active document
    - DELETE /session/documents/{id}: Delete a document
    - POST /session/reset: Start a new conversation
"""

from pdfchat.api.app import build_session, create_app

__all__ = ["build_session", "create_app"]
