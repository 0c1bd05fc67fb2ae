"""Integration tests for components working together as a system.

Coverage:
    - Session controller driving real drivers over stubbed webhooks
    - Session API endpoints over ASGI transport

Only the process boundary is replaced: webhooks answer through
httpx.MockTransport and the registry is an in-memory double.
"""
