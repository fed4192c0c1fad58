"""Error types raised while picking and posting a merge request."""
from __future__ import annotations

from pathlib import Path


class MergeNagError(RuntimeError):
    """Base class for merge-nag failures."""


class ConfigError(MergeNagError):
    """Raised when the config file is missing, malformed, or incomplete."""

    def __init__(self, path: Path, reason: str) -> None:
        """Create a config error."""
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


class FetchError(MergeNagError):
    """Raised when one upstream cannot be queried or its response parsed."""

    def __init__(self, upstream: str, reason: str) -> None:
        """Create a fetch error."""
        self.upstream = upstream
        self.reason = reason
        super().__init__(f"Fetching merge requests from {upstream} failed: {reason}")


class EmptyResultError(MergeNagError):
    """Raised when no candidate merge requests remain after aggregation."""

    def __init__(self) -> None:
        """Create an empty result error."""
        super().__init__(
            "No merge requests found on any GitLab instance. "
            "Check your config.yaml and network access.",
        )


class UserAbortError(MergeNagError):
    """Raised when the user cancels the picker or declines to send."""

    def __init__(self) -> None:
        """Create a user abort error."""
        super().__init__("Aborted.")


class DispatchError(MergeNagError):
    """Raised when the chat webhook call fails."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        """Create a dispatch error."""
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"slack webhook error: {reason}")
