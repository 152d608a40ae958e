"""Logging and asyncio task helpers for the UI-state layer."""
