"""Session orchestration for the PDF chat front end.

Responsibilities:
    - Tracking the active document and one conversation per document
    - Driving ingestion and chat turns with user-visible status
    - Reconciling local state with registry change notifications

Exposes a single lifecycle-scoped SessionController; the UI only reads
its snapshots and calls its operations.
"""

from pdfchat.session.controller import (
    DEFAULT_SUGGESTIONS,
    SessionController,
    session_scope,
)
from pdfchat.session.conversations import ConversationStore

__all__ = [
    "DEFAULT_SUGGESTIONS",
    "ConversationStore",
    "SessionController",
    "session_scope",
]
