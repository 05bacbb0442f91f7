"""
purger.delete — Delete every message in a collected record list.

Each record runs through its own small state machine: 204 is a success, 404
a skip, 403 a failure without retry, 401 aborts the whole run, and anything
else is retried with an escalating delay up to ``max_attempts``.  Rate-limit
waits sit on top of that and never consume an attempt.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from purger.config import Settings
from purger.errors import FailureKind, UnauthorizedError, classify_outcome
from purger.requester import BODY_SNIPPET_CHARS, RateLimitedRequester, RequestSpec

CONTAINER_KEYS = ("channel_id", "channelId")


def record_key(record) -> tuple[Optional[str], Optional[str]]:
    """Return ``(channel_id, message_id)`` for a record, ``None`` where missing."""
    if not isinstance(record, dict):
        return None, None
    channel_id = next((record[k] for k in CONTAINER_KEYS if record.get(k)), None)
    message_id = record.get("id") or None
    return channel_id, message_id


@dataclass
class DeletionTally:
    deleted: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0


@dataclass
class DeletionRun:
    tally: DeletionTally
    failures: list[dict] = field(default_factory=list)
    aborted: bool = False


class BulkMutator:
    """Applies DELETE to each record of a pre-collected list, sequentially."""

    def __init__(self, settings: Settings, headers: dict, requester: Optional[RateLimitedRequester] = None):
        self.settings = settings
        self.headers = headers
        self.max_attempts = settings.max_attempts
        self.requester = requester or RateLimitedRequester(
            min_delay_ms=settings.delete_delay_ms,
            default_wait_ms=settings.delete_default_wait_ms,
            timeout=settings.request_timeout,
        )

    def delete_request(self, channel_id: str, message_id: str) -> RequestSpec:
        return RequestSpec(
            method="DELETE",
            url=f"{self.settings.base_url}/channels/{channel_id}/messages/{message_id}",
            headers=self.headers,
        )

    def delete_record(self, channel_id: str, message_id: str) -> dict:
        """
        Delete one message, retrying transient failures.

        Returns a dict with ``status`` (deleted / skipped / failed), ``error``
        and ``attempts``.  Raises ``UnauthorizedError`` on 401.
        """
        request = self.delete_request(channel_id, message_id)
        attempt = 0
        last_error = None

        while attempt < self.max_attempts:
            attempt += 1
            print(f"   Attempt {attempt}/{self.max_attempts} to delete message {message_id} in channel {channel_id}...")
            outcome = self.requester.execute(request)
            kind = classify_outcome(outcome)

            if kind is None:
                print(f"   Deleted message {message_id}")
                return {"status": "deleted", "error": None, "attempts": attempt}

            if kind is FailureKind.RATE_LIMITED:
                print(f"   [WARN] Rate limited. Waiting {outcome.wait_ms / 1000} seconds before retrying same message...")
                time.sleep(outcome.wait_ms / 1000)
                attempt -= 1
                continue

            if kind is FailureKind.NOT_FOUND:
                print(f"   [SKIP] Message {message_id} not found (404). Already deleted or invalid ID.")
                return {"status": "skipped", "error": None, "attempts": attempt}

            if kind is FailureKind.FORBIDDEN:
                print(f"   [ERROR] Forbidden (403) to delete message {message_id}. Check token/permissions.")
                error = "Forbidden (403)"
                if outcome.body not in (None, ""):
                    error += f": {str(outcome.body)[:BODY_SNIPPET_CHARS]}"
                return {"status": "failed", "error": error, "attempts": attempt}

            if kind is FailureKind.UNAUTHORIZED:
                print("   [ERROR] Unauthorized (401). Invalid token.")
                raise UnauthorizedError(f"Unauthorized (401): {outcome.describe()}", status=outcome.status or 401)

            last_error = outcome.describe()
            print(f"   [ERROR] Error deleting message {message_id}: {last_error}")
            if attempt >= self.max_attempts:
                break
            retry_wait_ms = self.settings.retry_delay_base_ms * attempt
            print(f"   Waiting {retry_wait_ms / 1000}s before retry...")
            time.sleep(retry_wait_ms / 1000)

        return {
            "status": "failed",
            "error": f"Failed after {self.max_attempts} attempts ({last_error})",
            "attempts": attempt,
        }

    def run(self, records: list) -> DeletionRun:
        """Process ``records`` in order and return the tally plus failure log."""
        tally = DeletionTally(total=len(records))
        result = DeletionRun(tally=tally)

        for index, record in enumerate(records):
            channel_id, message_id = record_key(record)
            print(f"\n[{index + 1}/{len(records)}] Processing message ID: {message_id} in channel {channel_id}")

            if not channel_id or not message_id:
                print(f"   [SKIP] Message at index {index} is missing 'id' or 'channel_id'.")
                tally.skipped += 1
                continue

            try:
                outcome = self.delete_record(channel_id, message_id)
            except UnauthorizedError as e:
                print(f"\nCRITICAL ERROR encountered: {e}. Stopping deletion process.")
                tally.failed += 1
                result.failures.append(
                    {"index": index, "id": message_id, "channel_id": channel_id, "error": str(e)}
                )
                result.aborted = True
                break

            if outcome["status"] == "deleted":
                tally.deleted += 1
            elif outcome["status"] == "skipped":
                tally.skipped += 1
            else:
                tally.failed += 1
                result.failures.append(
                    {"index": index, "id": message_id, "channel_id": channel_id, "error": outcome["error"]}
                )

            if index < len(records) - 1:
                time.sleep(self.settings.delete_delay_ms / 1000)

        return result
