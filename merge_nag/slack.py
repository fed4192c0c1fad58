"""Build and post the chat notification for a merge request."""
from __future__ import annotations

import random
from collections.abc import Sequence

import requests
from pydantic import BaseModel

from merge_nag.errors import DispatchError
from merge_nag.gitlab import REQUEST_TIMEOUT_SECONDS, MergeRequestSummary

FALLBACK_PHRASE = "Merge please!"
EMOJI_PREFIX = ":gitlab:"
HTTP_ERROR_THRESHOLD = 300


class ChatPayload(BaseModel):
    """Webhook body carrying the notification text."""

    content: str


def choose_phrase(phrases: Sequence[str], rng: random.Random) -> str:
    """Pick a nag phrase uniformly at random, or the fallback if none."""
    if not phrases:
        return FALLBACK_PHRASE
    return rng.choice(phrases).strip()


def format_notification(
    merge_request: MergeRequestSummary,
    phrases: Sequence[str],
    rng: random.Random,
) -> ChatPayload:
    """Format the notification for a single merge request."""
    phrase = choose_phrase(phrases, rng)
    return ChatPayload(
        content="\n".join(
            [f"{EMOJI_PREFIX} {phrase}", merge_request.title, merge_request.web_url],
        ),
    )


def post_notification(webhook_url: str, payload: ChatPayload) -> None:
    """Post a notification to the chat webhook."""
    try:
        response = requests.post(
            webhook_url,
            data=payload.model_dump_json().encode("utf-8"),
            headers={"Content-Type": "application/json"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise DispatchError(str(exc)) from exc
    if response.status_code >= HTTP_ERROR_THRESHOLD:
        raise DispatchError(
            f"{response.status_code} {response.reason}",
            status_code=response.status_code,
        )
