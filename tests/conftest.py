"""Shared fixtures for the couple agenda tests."""

from __future__ import annotations

import pytest

from couple_agenda import AgendaSettings, AgendaStore


@pytest.fixture
def store() -> AgendaStore:
    """An empty agenda with default settings (UTC, weeks start Sunday)."""
    return AgendaStore()


@pytest.fixture
def french_store() -> AgendaStore:
    return AgendaStore(
        AgendaSettings.from_dict({"locale": "fr", "timezone": "Europe/Paris"})
    )
