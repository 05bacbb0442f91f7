"""
purger.report — Tabular rendering of deletion results.
"""

import os

import pandas as pd

FAILURE_COLUMNS = ["index", "id", "channel_id", "error"]


def tally_frame(tally) -> pd.DataFrame:
    """One row per outcome kind, in report order."""
    return pd.DataFrame(
        {
            "outcome": ["deleted", "skipped", "failed", "total"],
            "count": [tally.deleted, tally.skipped, tally.failed, tally.total],
        }
    )


def failures_frame(failures: list[dict]) -> pd.DataFrame:
    """Failure log as a DataFrame with a fixed column order."""
    return pd.DataFrame(failures, columns=FAILURE_COLUMNS)


def write_failure_report(failures: list[dict], path: str) -> str:
    """Write the failure log to CSV and return the path."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    failures_frame(failures).to_csv(path, index=False)
    return path
