"""Pytest configuration and fixtures for rhinoview tests.

This module provides pytest hooks and fixtures that apply across all tests.
"""

import logging

import pytest

console_logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def no_credential_prompts(monkeypatch):
    """Fail loudly instead of blocking on an interactive credential prompt."""

    def _refuse(*args, **kwargs):
        raise RuntimeError("Interactive prompt in test")

    monkeypatch.setattr("builtins.input", _refuse)
    monkeypatch.setattr("getpass.getpass", _refuse)
