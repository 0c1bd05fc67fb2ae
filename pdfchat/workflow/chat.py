"""Chat turn driver for the external chat webhook.

The webhook answers in several shapes (bare string, object with an
output/text/response field, or a one-element list of either), so replies
go through decode_reply() before they reach the conversation.
"""

import json
import logging
from typing import Any

import httpx

from pdfchat.models.schemas import ChatTurnRequest

logger = logging.getLogger(__name__)

APOLOGY_REPLY = "Sorry, there was an error processing your question."
FALLBACK_REPLY = "Sorry, I couldn't process the response."

# Content fields in priority order
REPLY_FIELDS = ("output", "text", "response")


class ChatTransportError(Exception):
    """Raised when a chat turn cannot be delivered or its reply read."""


def _unescape(text: str) -> str:
    return text.replace("\\n", "\n")


def _serialize(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def decode_reply(payload: Any) -> str:
    """Normalize a chat webhook payload into message text.

    Tries, in order: sequence (first element is decoded), bare string,
    object with output, text, then response field. Anything else is
    serialized as JSON. Literal "\\n" sequences become real newlines.

    Args:
        payload: Parsed JSON body of the chat webhook.

    Returns:
        Text for the assistant message.
    """
    if isinstance(payload, list):
        if not payload:
            return FALLBACK_REPLY
        payload = payload[0]

    if payload is None:
        return FALLBACK_REPLY

    if isinstance(payload, str):
        return _unescape(payload)

    if isinstance(payload, dict):
        for name in REPLY_FIELDS:
            value = payload.get(name)
            if not value:
                continue
            return _unescape(value) if isinstance(value, str) else _serialize(value)

    return _unescape(_serialize(payload))


class ChatTurnDriver:
    """Sends user turns to the chat webhook and returns decoded replies."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        chat_url: str,
        timeout: float = 120.0,
    ) -> None:
        self._http = http_client
        self._chat_url = chat_url
        self._timeout = timeout

    async def request_reply(
        self,
        conversation_id: str,
        message: str,
        filename: str | None = None,
    ) -> str:
        """Post one user turn and decode the reply.

        Raises:
            ChatTransportError: On network failure, HTTP error or non-JSON body.
        """
        request = ChatTurnRequest(
            conversation_id=conversation_id,
            message=message,
            filename=filename,
        )
        try:
            response = await self._http.post(
                self._chat_url,
                json=request.model_dump(by_alias=True, exclude_none=True),
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ChatTransportError(f"Chat webhook returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ChatTransportError(f"Chat webhook unreachable: {e}") from e
        except ValueError as e:
            raise ChatTransportError(f"Chat webhook sent invalid JSON: {e}") from e
        return decode_reply(payload)

    async def reply(
        self,
        conversation_id: str,
        message: str,
        filename: str | None = None,
    ) -> str:
        """Like request_reply(), but failures become the apology text."""
        try:
            return await self.request_reply(conversation_id, message, filename)
        except ChatTransportError as e:
            logger.error(f"Chat turn failed for conversation {conversation_id}: {e}")
            return APOLOGY_REPLY
