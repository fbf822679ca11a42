"""Integration tests for one-way Yuque to Confluence sync.

These tests run complete sync journeys through SyncCommand against the
in-memory services in tests.helpers, so no credentials or network access
are required.
"""
