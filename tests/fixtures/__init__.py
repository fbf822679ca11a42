"""Test fixtures for the sync tests.

This module provides sample Yuque lake HTML documents and image payloads
used by the converter and end-to-end tests.
"""
