"""Test runner entry points: CLI and pytest plugin."""
