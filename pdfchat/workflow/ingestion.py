"""Ingestion workflow driver.

Submits a document link to the external ingestion webhook, narrates
cosmetic progress while the workflow runs, and reconciles a successful
result against the document registry.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Self

import httpx
from pydantic import ValidationError

from pdfchat.models.schemas import Document, IngestionRequest, IngestionResponse
from pdfchat.registry.client import DocumentRegistry

logger = logging.getLogger(__name__)

INGESTION_STEPS: tuple[str, ...] = (
    "Analyzing document structure...",
    "Splitting into text chunks...",
    "Generating vector embeddings...",
    "Saving to vector database...",
    "Configuring agent memory...",
)


class IngestionError(Exception):
    """Base class for failed ingestion attempts."""


class IngestionTransportError(IngestionError):
    """Network failure, HTTP error status or unreadable response."""


class IngestionRejectedError(IngestionError):
    """The workflow answered, but not with a success."""


class ProgressTicker:
    """Cycles through fixed stage descriptions on an interval.

    Purely cosmetic: it does not track backend progress. Used as an async
    context manager so the timer stops on every exit path.
    """

    def __init__(
        self,
        steps: Sequence[str],
        interval: float,
        on_step: Callable[[str], None],
    ) -> None:
        if not steps:
            raise ValueError("ProgressTicker needs at least one step")
        self._steps = tuple(steps)
        self._interval = interval
        self._on_step = on_step
        self._task: asyncio.Task[None] | None = None

    async def _cycle(self) -> None:
        index = 0
        while True:
            await asyncio.sleep(self._interval)
            index = (index + 1) % len(self._steps)
            self._on_step(self._steps[index])

    async def __aenter__(self) -> Self:
        self._on_step(self._steps[0])
        self._task = asyncio.create_task(self._cycle())
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


@dataclass
class IngestionOutcome:
    """Result of a successful ingestion.

    Attributes:
        document: Newest registry entry, adopted as the active document.
        documents: Full registry listing fetched after success.
        suggestions: Example questions offered by the workflow, if any.
    """

    document: Document
    documents: list[Document] = field(default_factory=list)
    suggestions: list[str] | None = None


class IngestionDriver:
    """Drives one ingestion attempt per call to ingest()."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        registry: DocumentRegistry,
        ingest_url: str,
        progress_interval: float = 2.5,
        timeout: float = 300.0,
        steps: Sequence[str] = INGESTION_STEPS,
    ) -> None:
        """Initialize the driver.

        Args:
            http_client: Shared async HTTP client.
            registry: Registry re-read after a successful workflow run.
            ingest_url: Ingestion webhook endpoint.
            progress_interval: Seconds between narrator steps.
            timeout: Request timeout in seconds.
            steps: Stage descriptions shown by the narrator.
        """
        self._http = http_client
        self._registry = registry
        self._ingest_url = ingest_url
        self._progress_interval = progress_interval
        self._timeout = timeout
        self._steps = steps

    async def _submit(self, url: str) -> httpx.Response:
        payload = IngestionRequest(pdf_link=url).model_dump(by_alias=True)
        try:
            response = await self._http.post(
                self._ingest_url, json=payload, timeout=self._timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IngestionTransportError(
                f"Ingestion webhook returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise IngestionTransportError(f"Ingestion webhook unreachable: {e}") from e
        return response

    async def ingest(self, url: str, on_step: Callable[[str], None]) -> IngestionOutcome:
        """Run the ingestion workflow for a document link.

        The narrator runs only while the webhook request is in flight.

        Args:
            url: Validated absolute document URL.
            on_step: Receives each narrator step.

        Returns:
            IngestionOutcome with the newly adopted document.

        Raises:
            IngestionTransportError: Network failure, HTTP error or malformed body.
            IngestionRejectedError: The workflow did not report success.
        """
        async with ProgressTicker(self._steps, self._progress_interval, on_step):
            response = await self._submit(url)

        try:
            result = IngestionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise IngestionTransportError(f"Malformed ingestion response: {e}") from e

        if not result.succeeded:
            raise IngestionRejectedError(f"Ingestion workflow reported '{result.status}'")

        documents = await self._registry.list_documents()
        if not documents:
            raise IngestionRejectedError("Workflow succeeded but no document was registered")

        logger.info(f"Ingested {url} as {documents[0].filename}")
        return IngestionOutcome(
            document=documents[0],
            documents=documents,
            suggestions=result.suggestions,
        )
