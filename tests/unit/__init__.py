"""Unit tests for the syndesis QE toolkit.

Unit tests verify individual components in isolation using the scripted
in-memory cluster client or httpx mock transports. No cluster is required.

Run with: pytest tests/unit/ -v
"""
