"""Unit tests for individual components in isolation.

Coverage:
    - models/: Payload aliases, URL validation, immutability
    - workflow/: Reply decoding, progress ticker, webhook drivers
    - session/: Conversation store
    - registry/: Supabase query construction and failure handling
    - config: Environment-driven configuration validation
"""
