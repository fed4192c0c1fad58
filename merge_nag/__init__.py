"""Nag your team in chat about one of your open GitLab merge requests."""

__version__ = "0.1.0"
