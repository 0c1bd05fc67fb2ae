import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

_URL_ADAPTER = TypeAdapter(AnyUrl)


def new_identifier() -> str:
    """Mint an opaque identifier for conversations and messages."""
    return str(uuid.uuid4())


def validate_document_url(url: str) -> str:
    """Check that a document link is a well-formed absolute URL.

    No scheme or extension whitelist is applied; the ingestion workflow
    decides whether the link points at a usable PDF.

    Args:
        url: Link entered by the user.

    Returns:
        The trimmed URL, exactly as it will be sent to the workflow.

    Raises:
        ValueError: If the link is empty or not an absolute URL.
    """
    candidate = url.strip() if isinstance(url, str) else ""
    if not candidate:
        raise ValueError("Document URL is required")
    try:
        _URL_ADAPTER.validate_python(candidate)
    except ValidationError as e:
        raise ValueError(f"Invalid document URL: {candidate}") from e
    return candidate


class IngestionStatus(str, Enum):
    """Ingestion states of the session."""

    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Document(BaseModel):
    """A processed PDF as stored in the remote registry.

    Attributes:
        id: Registry identifier (numeric or opaque).
        filename: Display name of the file.
        file_url: Source link the document was ingested from.
        processed_at: ISO-8601 timestamp of ingestion.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    filename: str
    file_url: str
    processed_at: str

    @property
    def key(self) -> str:
        """Identity used by the conversation store."""
        return str(self.id)


class Message(BaseModel):
    """A single turn in a conversation.

    Attributes:
        role: Who wrote the message.
        content: The message text.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str


class Conversation(BaseModel):
    """Ordered message history of one document plus its correlation id."""

    conversation_id: str = Field(default_factory=new_identifier)
    messages: list[Message] = Field(default_factory=list)

    def append(self, message: Message) -> None:
        self.messages.append(message)


class IngestionRequest(BaseModel):
    """Body sent to the ingestion webhook."""

    model_config = ConfigDict(populate_by_name=True)

    pdf_link: str = Field(..., alias="pdfLink")


class IngestionResponse(BaseModel):
    """Reply of the ingestion webhook.

    Attributes:
        status: Workflow result; only "success" counts as success.
        suggestions: Optional example questions for the new document.
    """

    status: str
    suggestions: list[str] | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class ChatTurnRequest(BaseModel):
    """Body sent to the chat webhook for one user turn.

    Attributes:
        conversation_id: Correlation id of the active conversation.
        message_id: Fresh id for this message.
        message: The user's text.
        filename: Active document name, as a context hint.
        created_at: ISO-8601 creation timestamp (UTC).
    """

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(..., alias="conversationId")
    message_id: str = Field(default_factory=new_identifier, alias="messageId")
    message: str = Field(..., min_length=1)
    filename: str | None = None
    created_at: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        alias="createdAt",
    )


class SessionSnapshot(BaseModel):
    """Read-only view of the session handed to the presentation layer."""

    status: IngestionStatus
    loading_step: str = ""
    thinking: bool = False
    active_document: Document | None = None
    documents: list[Document] = Field(default_factory=list)
    conversation_id: str
    messages: list[Message] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class UploadRequest(BaseModel):
    """Request payload for starting an ingestion.

    Attributes:
        url: Absolute link to the document.
    """

    url: str = Field(..., min_length=1)


class MessageRequest(BaseModel):
    """Request payload for sending a chat turn.

    Attributes:
        message: User's question.
    """

    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v
