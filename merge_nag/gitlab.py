"""Fetch the current user's open merge requests from GitLab and rank them."""
from __future__ import annotations

import concurrent.futures
import itertools
import time
from collections.abc import Iterable, Sequence

import requests
from loguru import logger
from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    SecretStr,
    TypeAdapter,
    ValidationError,
)

from merge_nag.errors import FetchError
from merge_nag.logs import log_elapsed

DRAFT_PREFIXES = ("draft:", "draft ", "wip:", "wip ")
# GitLab rejects per_page above 100
GITLAB_MAX_PAGE_SIZE = 100
MIN_HARD_LIMIT = 20
HARD_LIMIT_FACTOR = 4
HTTP_SUCCESS_MIN = 200
HTTP_SUCCESS_LIMIT = 300
REQUEST_TIMEOUT_SECONDS = 15


class UpstreamEndpoint(BaseModel):
    """A GitLab API base URL and the token used to query it."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    token: SecretStr


class MergeRequestSummary(BaseModel):
    """The fields of a merge request needed to pick and announce it."""

    model_config = ConfigDict(frozen=True)

    title: str
    web_url: str
    updated_at: AwareDatetime


MERGE_REQUEST_LIST = TypeAdapter(list[MergeRequestSummary])


def is_draft(title: str) -> bool:
    """Return True when the title marks a draft or work-in-progress MR."""
    return title.lstrip().lower().startswith(DRAFT_PREFIXES)


def hard_limit_for(picker_limit: int) -> int:
    """Return how many merge requests to request from each upstream."""
    return max(picker_limit * HARD_LIMIT_FACTOR, MIN_HARD_LIMIT)


def page_size(hard_limit: int) -> int:
    """Double the limit to leave room for drafts, within GitLab's page cap."""
    return min(hard_limit * 2, GITLAB_MAX_PAGE_SIZE)


def merge_requests_url(endpoint: UpstreamEndpoint) -> str:
    """Return the merge request listing URL for an endpoint."""
    return f"{endpoint.base_url.rstrip('/')}/merge_requests"


def fetch_merge_requests(
    endpoint: UpstreamEndpoint,
    hard_limit: int,
) -> list[MergeRequestSummary]:
    """Fetch open merge requests authored by the token's user, newest first."""
    params: dict[str, str | int] = {
        "scope": "created_by_me",
        "state": "opened",
        "order_by": "updated_at",
        "sort": "desc",
        "per_page": page_size(hard_limit),
    }
    headers = {"PRIVATE-TOKEN": endpoint.token.get_secret_value()}
    try:
        response = requests.get(
            merge_requests_url(endpoint),
            headers=headers,
            params=params,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise FetchError(endpoint.base_url, str(exc)) from exc
    if not HTTP_SUCCESS_MIN <= response.status_code < HTTP_SUCCESS_LIMIT:
        raise FetchError(
            endpoint.base_url,
            f"{response.status_code} {response.reason}",
        )
    try:
        payload = response.json()
    except ValueError as exc:
        raise FetchError(endpoint.base_url, "response is not valid JSON") from exc
    try:
        return MERGE_REQUEST_LIST.validate_python(payload)
    except ValidationError as exc:
        raise FetchError(
            endpoint.base_url,
            f"unexpected response shape ({exc.error_count()} errors)",
        ) from exc


def fetch_all(
    endpoints: Sequence[UpstreamEndpoint],
    hard_limit: int,
) -> list[list[MergeRequestSummary]]:
    """Fetch every endpoint in parallel; failed endpoints contribute nothing.

    Results are returned in endpoint order, whatever order the requests
    finish in.
    """
    if not endpoints:
        return []
    results: list[list[MergeRequestSummary]] = [[] for _ in endpoints]

    def task(endpoint: UpstreamEndpoint, index: int) -> tuple[int, list[MergeRequestSummary]]:
        """Fetch one endpoint and return its index and merge requests."""
        start = time.perf_counter()
        try:
            merge_requests = fetch_merge_requests(endpoint, hard_limit)
        except FetchError as exc:
            logger.warning(
                "Skipping upstream: {reason}",
                reason=exc.reason,
                upstream=endpoint.base_url,
            )
            return index, []
        log_elapsed(
            "Fetched merge requests",
            start,
            upstream=endpoint.base_url,
            count=len(merge_requests),
        )
        return index, merge_requests

    with concurrent.futures.ThreadPoolExecutor(max_workers=len(endpoints)) as executor:
        futures = [
            executor.submit(task, endpoint, idx) for idx, endpoint in enumerate(endpoints)
        ]
        for future in concurrent.futures.as_completed(futures):
            index, merge_requests = future.result()
            results[index] = merge_requests
    return results


def aggregate(
    per_endpoint_results: Iterable[Sequence[MergeRequestSummary]],
    picker_limit: int,
) -> list[MergeRequestSummary]:
    """Merge upstream results into the ranked candidate list.

    Drafts are dropped, duplicate URLs keep their first occurrence, and the
    rest is sorted newest first (ties keep input order) and truncated to
    ``picker_limit`` entries.
    """
    seen_urls: set[str] = set()
    candidates: list[MergeRequestSummary] = []
    for merge_request in itertools.chain.from_iterable(per_endpoint_results):
        if is_draft(merge_request.title) or merge_request.web_url in seen_urls:
            continue
        seen_urls.add(merge_request.web_url)
        candidates.append(merge_request)
    candidates.sort(key=lambda merge_request: merge_request.updated_at, reverse=True)
    return candidates[:picker_limit]
