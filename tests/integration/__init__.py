"""Integration tests for the syndesis QE toolkit.

Integration tests drive the CLI end to end against the in-memory cluster
client, including profile files on disk.

Run with: pytest tests/integration/ -v -m integration
"""
