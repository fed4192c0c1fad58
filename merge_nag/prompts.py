"""Interactive selection and confirmation prompts."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TextIO

from rich.console import Console
from rich.markup import escape
from rich.prompt import IntPrompt

from merge_nag.gitlab import MergeRequestSummary

PICKER_LABEL = "Select a Merge Request"
CONFIRM_PROMPT = "Confirm send to Slack? (y/n): "
TIMESTAMP_FORMAT = "%d %b %y %H:%M %Z"


def format_timestamp(value: datetime) -> str:
    """Format a timestamp in RFC 822 style, e.g. ``02 Jan 24 10:00 UTC``."""
    return value.strftime(TIMESTAMP_FORMAT).strip()


def describe(merge_request: MergeRequestSummary) -> str:
    """Return the one-line picker label for a merge request."""
    return f"{merge_request.title} (Updated: {format_timestamp(merge_request.updated_at)})"


def pick(
    candidates: Sequence[MergeRequestSummary],
    console: Console,
) -> MergeRequestSummary | None:
    """Let the user choose one candidate; return None when they cancel."""
    if not candidates:
        return None
    console.print(f"[bold]{PICKER_LABEL}[/bold]")
    for number, merge_request in enumerate(candidates, start=1):
        console.print(f"  [cyan]{number}[/cyan]. {escape(describe(merge_request))}")
    try:
        choice = IntPrompt.ask(
            "Merge request",
            console=console,
            choices=[str(number) for number in range(1, len(candidates) + 1)],
            show_choices=False,
            default=1,
        )
    except (EOFError, KeyboardInterrupt):
        console.print()
        return None
    return candidates[choice - 1]


def is_confirmed(answer: str) -> bool:
    """Return True only for a plain ``y`` answer, ignoring case and padding."""
    return answer.strip().lower() == "y"


def confirm(
    merge_request: MergeRequestSummary,
    console: Console,
    stream: TextIO | None = None,
) -> bool:
    """Show the selected merge request and ask whether to send it."""
    console.print(f"Latest MR: {escape(merge_request.title)}")
    console.print(f"URL: {escape(merge_request.web_url)}")
    console.print(f"Updated: {format_timestamp(merge_request.updated_at)}")
    try:
        answer = console.input(CONFIRM_PROMPT, stream=stream)
    except (EOFError, KeyboardInterrupt):
        console.print()
        return False
    return is_confirmed(answer)
