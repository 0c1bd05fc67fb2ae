"""Pytest fixtures and shared test configuration.

Provides an in-memory registry double, a scriptable webhook transport and
a session controller wired to both.

Fixtures:
    - registry: FakeRegistry seeded with two documents
    - webhooks: WebhookStub answering the ingestion and chat endpoints
    - http_client: HTTPX client routed to the webhook stub
    - ingestion / chat: Drivers using the stubbed client
    - controller: Unstarted SessionController with short timings
"""

import asyncio
from collections.abc import AsyncGenerator, Callable

import httpx
import pytest

from pdfchat.models.schemas import Document
from pdfchat.registry.client import RegistryError
from pdfchat.session.controller import SessionController
from pdfchat.workflow.chat import ChatTurnDriver
from pdfchat.workflow.ingestion import IngestionDriver

INGEST_URL = "https://workflow.test/webhook/ingest"
CHAT_URL = "https://workflow.test/webhook/chat"

PROGRESS_INTERVAL = 0.01
ERROR_RESET_DELAY = 0.05


def make_document(
    document_id: int | str,
    filename: str | None = None,
    processed_at: str = "2024-01-01T00:00:00+00:00",
) -> Document:
    """Build a registry document with predictable fields."""
    name = filename or f"doc-{document_id}.pdf"
    return Document(
        id=document_id,
        filename=name,
        file_url=f"https://files.test/{name}",
        processed_at=processed_at,
    )


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeRegistry:
    """In-memory stand-in for DocumentRegistry."""

    def __init__(self, documents: list[Document] | None = None) -> None:
        self.documents = list(documents or [])
        self.callbacks: list[Callable[[], None]] = []
        self.deleted: list[Document] = []
        self.dispose_calls = 0
        self.fail_reads = False
        self.fail_delete = False

    async def fetch_documents(self) -> list[Document]:
        if self.fail_reads:
            raise RegistryError("registry unreachable")
        return sorted(self.documents, key=lambda d: d.processed_at, reverse=True)

    async def list_documents(self) -> list[Document]:
        try:
            return await self.fetch_documents()
        except RegistryError:
            return []

    async def delete_document(self, document_id: int | str) -> Document:
        if self.fail_delete:
            raise RegistryError("permission denied")
        match = next((d for d in self.documents if d.key == str(document_id)), None)
        if match is None:
            raise RegistryError(f"Document {document_id} was not deleted")
        self.documents.remove(match)
        self.deleted.append(match)
        return match

    async def subscribe_to_changes(self, callback: Callable[[], None]):
        self.callbacks.append(callback)

        async def dispose() -> None:
            self.dispose_calls += 1

        return dispose

    def emit_change(self) -> None:
        for callback in self.callbacks:
            callback()


Responder = Callable[[httpx.Request], httpx.Response]


class WebhookStub:
    """Scriptable answers for the ingestion and chat webhooks.

    Responders are called per request, so they may raise transport errors
    or mutate the registry before answering. Gates hold a request in
    flight until they are set.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.ingest: Responder = lambda request: httpx.Response(200, json={"status": "success"})
        self.chat: Responder = lambda request: httpx.Response(200, json={"output": "Hello!"})
        self.ingest_gate: asyncio.Event | None = None
        self.chat_gate: asyncio.Event | None = None

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == INGEST_URL:
            if self.ingest_gate is not None:
                await self.ingest_gate.wait()
            return self.ingest(request)
        if self.chat_gate is not None:
            await self.chat_gate.wait()
        return self.chat(request)


@pytest.fixture
def registry() -> FakeRegistry:
    """Registry holding an older and a newer document."""
    return FakeRegistry(
        [
            make_document(1, "older.pdf", "2024-01-01T10:00:00+00:00"),
            make_document(2, "newer.pdf", "2024-02-01T10:00:00+00:00"),
        ]
    )


@pytest.fixture
def webhooks() -> WebhookStub:
    return WebhookStub()


@pytest.fixture
async def http_client(webhooks: WebhookStub) -> AsyncGenerator[httpx.AsyncClient]:
    """Create async HTTP client answered by the webhook stub.

    Yields:
        AsyncClient whose requests never leave the process.
    """
    transport = httpx.MockTransport(webhooks.handler)
    async with httpx.AsyncClient(transport=transport) as client:
        yield client


@pytest.fixture
def ingestion(http_client: httpx.AsyncClient, registry: FakeRegistry) -> IngestionDriver:
    return IngestionDriver(
        http_client,
        registry,
        INGEST_URL,
        progress_interval=PROGRESS_INTERVAL,
        timeout=5.0,
    )


@pytest.fixture
def chat(http_client: httpx.AsyncClient) -> ChatTurnDriver:
    return ChatTurnDriver(http_client, CHAT_URL, timeout=5.0)


@pytest.fixture
async def controller(
    registry: FakeRegistry,
    ingestion: IngestionDriver,
    chat: ChatTurnDriver,
) -> AsyncGenerator[SessionController]:
    """Create an unstarted session controller with short timings.

    Yields:
        SessionController closed again after the test.
    """
    session = SessionController(
        registry,
        ingestion,
        chat,
        error_reset_delay=ERROR_RESET_DELAY,
    )
    yield session
    await session.close()
