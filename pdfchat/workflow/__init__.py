"""Drivers for the two external webhooks.

Responsibilities:
    - Ingestion: submit a document link, narrate progress, reconcile the registry
    - Chat: post user turns and normalize the heterogeneous reply shapes
"""

from pdfchat.workflow.chat import (
    APOLOGY_REPLY,
    ChatTransportError,
    ChatTurnDriver,
    decode_reply,
)
from pdfchat.workflow.ingestion import (
    INGESTION_STEPS,
    IngestionDriver,
    IngestionError,
    IngestionOutcome,
    IngestionRejectedError,
    IngestionTransportError,
    ProgressTicker,
)

__all__ = [
    "APOLOGY_REPLY",
    "INGESTION_STEPS",
    "ChatTransportError",
    "ChatTurnDriver",
    "IngestionDriver",
    "IngestionError",
    "IngestionOutcome",
    "IngestionRejectedError",
    "IngestionTransportError",
    "ProgressTicker",
    "decode_reply",
]
