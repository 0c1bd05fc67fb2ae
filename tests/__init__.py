"""Test package for PDF Chat.

Structure:
    - unit/: Individual modules in isolation (decoder, store, drivers, registry)
    - integration/: Session controller and HTTP API wired together

External services are replaced by an in-memory registry and
httpx.MockTransport webhooks; no network access is needed.
Leverages pytest with pytest-check for soft assertions.
"""
