"""Shared fixtures for merge-nag tests."""
from __future__ import annotations

import io
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from merge_nag.gitlab import MergeRequestSummary


def make_mr(
    title: str,
    web_url: str | None = None,
    updated_at: datetime | str = "2024-01-01T00:00:00Z",
) -> MergeRequestSummary:
    """Build a merge request summary with sensible defaults."""
    return MergeRequestSummary(
        title=title,
        web_url=web_url or f"https://gitlab.example.com/mr/{title.lower().replace(' ', '-')}",
        updated_at=updated_at,
    )


def make_response(
    status_code: int = 200,
    payload: object = None,
    reason: str = "OK",
) -> MagicMock:
    """Build a fake requests response."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = [] if payload is None else payload
    return response


@pytest.fixture
def console() -> Console:
    """A console that records output instead of writing to the terminal."""
    return Console(file=io.StringIO(), width=200, color_system=None)
