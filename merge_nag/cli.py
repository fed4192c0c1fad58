"""Pick one of your recent GitLab merge requests and nag the team about it in chat."""
from __future__ import annotations

import random
import sys
import time
from typing import TextIO

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console

from merge_nag.errors import (
    ConfigError,
    DispatchError,
    EmptyResultError,
    UserAbortError,
)
from merge_nag.gitlab import MergeRequestSummary, aggregate, fetch_all, hard_limit_for
from merge_nag.logs import configure_logging, log_elapsed
from merge_nag.prompts import confirm, pick
from merge_nag.settings import Settings, default_config_path, load_settings
from merge_nag.slack import format_notification, post_notification

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_NO_CANDIDATES = 2
EXIT_DISPATCH_ERROR = 3
SENT_MESSAGE = "Sent to Slack!"


def run(
    settings: Settings,
    console: Console,
    rng: random.Random,
    stream: TextIO | None = None,
) -> MergeRequestSummary:
    """Fetch, pick, confirm and post; return the merge request that was sent."""
    endpoints = settings.endpoints()
    start = time.perf_counter()
    results = fetch_all(endpoints, hard_limit_for(settings.picker_limit))
    log_elapsed("Fetched upstreams", start, upstreams=len(endpoints))

    candidates = aggregate(results, settings.picker_limit)
    logger.info("Candidates ready", count=len(candidates))
    if not candidates:
        raise EmptyResultError

    picked = pick(candidates, console)
    if picked is None:
        raise UserAbortError
    if not confirm(picked, console, stream):
        raise UserAbortError

    payload = format_notification(picked, settings.slack.messages, rng)
    start = time.perf_counter()
    post_notification(settings.slack.webhook, payload)
    log_elapsed("Posted notification", start, web_url=picked.web_url)
    return picked


def main() -> int:
    """Run the merge-nag CLI."""
    load_dotenv()
    configure_logging()
    console = Console()
    config_path = default_config_path()
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        console.print(str(exc), markup=False, soft_wrap=True)
        return EXIT_CONFIG_ERROR
    logger.info("Loaded config", path=str(config_path), upstreams=len(settings.gitlab))

    rng = random.Random(time.time_ns())
    try:
        run(settings, console, rng)
    except EmptyResultError as exc:
        console.print(str(exc), markup=False, soft_wrap=True)
        return EXIT_NO_CANDIDATES
    except UserAbortError as exc:
        console.print(str(exc), markup=False, soft_wrap=True)
        return EXIT_OK
    except DispatchError as exc:
        console.print(f"Failed to send to Slack: {exc}", markup=False, soft_wrap=True)
        return EXIT_DISPATCH_ERROR
    console.print(SENT_MESSAGE)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
