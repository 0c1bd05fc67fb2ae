"""In-memory conversation store keyed by document identity."""

from pdfchat.models.schemas import Conversation


class ConversationStore:
    """Maps document ids to their conversations.

    Keys are normalized to strings so numeric ids from the registry and
    string ids from callers address the same entry.
    """

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}

    def get(self, document_id: int | str) -> Conversation | None:
        return self._conversations.get(str(document_id))

    def put(self, document_id: int | str, conversation: Conversation) -> None:
        self._conversations[str(document_id)] = conversation

    def remove(self, document_id: int | str) -> None:
        self._conversations.pop(str(document_id), None)

    def __contains__(self, document_id: object) -> bool:
        return str(document_id) in self._conversations

    def __len__(self) -> int:
        return len(self._conversations)
