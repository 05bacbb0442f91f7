"""
purger.collect — Walk the message search endpoint page by page.

The search API only discloses a running ``total_results``, never a cursor or
page count.  The total seen on the first successful page is frozen for the
run; paging stops when that many records have been accumulated, when a page
comes back empty (a stale total is treated as end-of-data), or on the first
non-rate-limit error (partial results are kept).
"""

import time
from typing import Iterator, Optional

from purger.config import Settings
from purger.requester import Outcome, OutcomeKind, RateLimitedRequester, RequestSpec


def flatten_messages(body) -> list[dict]:
    """Search responses nest each hit in its own context list: ``[[msg], ...]``."""
    if not isinstance(body, dict):
        return []
    records: list[dict] = []
    for group in body.get("messages") or []:
        if isinstance(group, list):
            records.extend(group)
        else:
            records.append(group)
    return records


def reported_total(body) -> Optional[int]:
    if not isinstance(body, dict):
        return None
    total = body.get("total_results")
    if isinstance(total, bool) or not isinstance(total, int):
        return None
    return total


class Collector:
    """Reconstructs the full result set for one author in one guild."""

    def __init__(self, settings: Settings, headers: dict, requester: Optional[RateLimitedRequester] = None):
        self.settings = settings
        self.headers = headers
        self.requester = requester or RateLimitedRequester(
            min_delay_ms=settings.search_rate_limit_floor_ms,
            default_wait_ms=settings.search_default_wait_ms,
            timeout=settings.request_timeout,
        )
        self.known_total: Optional[int] = None
        self.collected = 0
        self.stop_reason: Optional[str] = None
        self.last_error: Optional[str] = None

    def search_request(self, offset: int) -> RequestSpec:
        params = {"author_id": self.settings.author_id}
        if offset > 0:
            params["offset"] = offset
        return RequestSpec(
            method="GET",
            url=f"{self.settings.base_url}/guilds/{self.settings.guild_id}/messages/search",
            headers=self.headers,
            params=params,
        )

    def _stop(self, reason: str, outcome: Optional[Outcome] = None) -> None:
        self.stop_reason = reason
        if outcome is not None:
            self.last_error = outcome.describe()

    def iter_pages(self) -> Iterator[list[dict]]:
        """
        Yield each non-empty page of records in server order.

        Rate-limited requests are retried at the same offset after the
        reported wait; they do not count as progress.
        """
        self.known_total = None
        self.collected = 0
        self.stop_reason = None
        self.last_error = None
        offset = 0

        while True:
            target = self.known_total if self.known_total is not None else "Unknown"
            print(f"Fetching messages with offset: {offset}... (Target total: {target})")
            outcome = self.requester.execute(self.search_request(offset))

            if outcome.kind is OutcomeKind.RATE_LIMITED:
                print(f"  [WARN] Rate limited. Waiting {outcome.wait_ms / 1000} seconds...")
                time.sleep(outcome.wait_ms / 1000)
                continue

            if outcome.kind is not OutcomeKind.OK:
                self._stop("error", outcome)
                print(f"  [ERROR] Failed to fetch messages at offset {offset}: {self.last_error}")
                print(f"  [WARN] Returning potentially incomplete list ({self.collected} messages).")
                return

            page = flatten_messages(outcome.body)
            if self.known_total is None:
                self.known_total = reported_total(outcome.body)

            if page:
                self.collected += len(page)
                print(f"  Fetched {len(page)} messages. Total accumulated: {self.collected} / {self.known_total}")
                yield page
            else:
                print(f"  No messages found on this page (offset {offset}).")

            if self.known_total is None or self.collected >= self.known_total:
                self._stop("complete")
                print(f"Finished fetching. Reached expected total ({self.known_total}).")
                return
            if not page:
                self._stop("exhausted")
                print(
                    f"  [WARN] Received 0 messages, but expected total is {self.known_total}. "
                    f"Accumulated: {self.collected}. The reported total may be inaccurate."
                )
                return

            time.sleep(self.settings.search_delay_ms / 1000)
            offset = self.collected

    def collect(self) -> list[dict]:
        """Run the full paging loop and return every accumulated record."""
        records: list[dict] = []
        for page in self.iter_pages():
            records.extend(page)
        return records
