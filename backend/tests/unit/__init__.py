"""
Unit Tests

Unit tests run in isolation without external dependencies.
Redis and the AI backends are replaced by in-memory doubles or mocked
transports, so no server needs to be running.
"""
