"""
purger.observability — Run metrics lifecycle and alert evaluation.

Threshold Rationale
-------------------
FAILURE_RATE_WARNING  (10 %)  — Most failures on a healthy run are stray 403s
    on messages in channels the account lost access to.
FAILURE_RATE_CRITICAL (25 %)  — A quarter of deletes failing points at a
    permissions or throttling problem rather than individual messages.
EMPTY_RESULT_MIN_ROWS (1)     — A collection that finds nothing is usually a
    wrong AUTHOR_ID / GUILD_ID pair.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

FAILURE_RATE_WARNING = 10.0
FAILURE_RATE_CRITICAL = 25.0
EMPTY_RESULT_MIN_ROWS = 1


def start_run(stage: str) -> dict:
    """Begin a new run.  Returns a metrics dict to populate."""
    return {
        "run_id": str(uuid.uuid4()),
        "run_start": datetime.now(timezone.utc),
        "run_end": None,
        "duration_seconds": None,
        "stage": stage,
        "records_collected": 0,
        "reported_total": None,
        "deleted": 0,
        "skipped": 0,
        "failed": 0,
        "total": 0,
        "aborted": False,
        "failure_rate_pct": None,
        "status": "running",
        "error_message": None,
    }


def record_collection(metrics: dict, collector, records: list) -> dict:
    """Copy a finished collector's state into ``metrics``."""
    metrics["records_collected"] = len(records)
    metrics["reported_total"] = collector.known_total
    if collector.stop_reason == "error":
        metrics["error_message"] = collector.last_error
    return metrics


def record_deletion(metrics: dict, run) -> dict:
    """Copy a finished ``DeletionRun`` into ``metrics``."""
    metrics["deleted"] = run.tally.deleted
    metrics["skipped"] = run.tally.skipped
    metrics["failed"] = run.tally.failed
    metrics["total"] = run.tally.total
    metrics["aborted"] = run.aborted
    if run.aborted and run.failures:
        metrics["error_message"] = run.failures[-1]["error"]
    return metrics


def finish_run(metrics: dict) -> dict:
    """Finalise metrics: compute duration, failure rate, mark completed/aborted."""
    metrics["run_end"] = datetime.now(timezone.utc)
    elapsed = (metrics["run_end"] - metrics["run_start"]).total_seconds()
    metrics["duration_seconds"] = round(elapsed, 2)

    processed = metrics["deleted"] + metrics["skipped"] + metrics["failed"]
    if processed > 0:
        metrics["failure_rate_pct"] = round(metrics["failed"] / processed * 100, 2)
    else:
        metrics["failure_rate_pct"] = 0.0

    if metrics["status"] == "running":
        metrics["status"] = "aborted" if metrics["aborted"] else "completed"

    return metrics


def _alert(metrics: dict, severity: str, category: str, condition: str, message: str,
           value: Optional[float] = None, threshold: Optional[float] = None) -> dict:
    """One alert tied to the run described by ``metrics``."""
    return {
        "alert_id": str(uuid.uuid4()),
        "run_id": metrics["run_id"],
        "stage": metrics["stage"],
        "created_at": datetime.now(timezone.utc),
        "severity": severity,
        "category": category,
        "condition_name": condition,
        "message": message,
        "metric_value": value,
        "threshold": threshold,
    }


# Checked highest first; only the first matching level raises an alert
FAILURE_RATE_LEVELS = (
    ("CRITICAL", FAILURE_RATE_CRITICAL),
    ("WARNING", FAILURE_RATE_WARNING),
)


def _collection_alerts(metrics: dict) -> list[dict]:
    collected = metrics["records_collected"]
    total: Optional[int] = metrics.get("reported_total")
    alerts: list[dict] = []

    if collected < EMPTY_RESULT_MIN_ROWS:
        alerts.append(_alert(
            metrics, "WARNING", "empty_results", "empty_collection",
            f"Search returned no messages for this author "
            f"(expected at least {EMPTY_RESULT_MIN_ROWS}); check AUTHOR_ID and GUILD_ID",
            float(collected), float(EMPTY_RESULT_MIN_ROWS),
        ))
    if total is not None and collected < total:
        reason = metrics.get("error_message") or "search stopped returning messages"
        alerts.append(_alert(
            metrics, "WARNING", "completeness", "collection_incomplete",
            f"Saved {collected} of the {total} messages the search reported ({reason})",
            float(collected), float(total),
        ))
    return alerts


def evaluate_alerts(metrics: dict) -> list[dict]:
    """
    Evaluate alert conditions against a finished metrics dict.
    Returns zero or more alert dicts.
    """
    if metrics["stage"] == "collect":
        return _collection_alerts(metrics)

    alerts: list[dict] = []
    processed = metrics["deleted"] + metrics["skipped"] + metrics["failed"]

    if metrics["aborted"]:
        alerts.append(_alert(
            metrics, "CRITICAL", "authentication", "run_aborted",
            f"Deletion aborted after {processed} of {metrics['total']} messages: "
            f"{metrics.get('error_message') or 'unauthorized'}",
        ))

    failure_rate = metrics.get("failure_rate_pct") or 0.0
    for severity, threshold in FAILURE_RATE_LEVELS:
        if failure_rate >= threshold:
            alerts.append(_alert(
                metrics, severity, "failure_rate", f"failure_rate_{severity.lower()}",
                f"{metrics['failed']} of {processed} deletions failed ({failure_rate:.1f}%, "
                f"{severity.lower()} level is {threshold:g}%)",
                failure_rate, threshold,
            ))
            break

    return alerts
