"""
purger.storage — Persist the collected record list and read it back.
"""

import json
import os

from purger.errors import MalformedInputError


def save_records(records: list[dict], path: str) -> str:
    """Write ``records`` as pretty-printed JSON; returns the path written."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return path


def load_records(path: str) -> list[dict]:
    """
    Read a record list written by ``save_records``.

    Raises ``MalformedInputError`` if the file is missing, is not JSON, does
    not contain a list, or its first entry lacks ``id`` / ``channel_id``.
    An empty list is returned as-is.
    """
    if not os.path.isfile(path):
        raise MalformedInputError(f"Record file not found at '{path}'.  Run the collect step first.")

    try:
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Record file '{path}' is not valid JSON (UTF-8): {e}") from e

    if not isinstance(records, list):
        raise MalformedInputError(f"Record file '{path}' does not contain a JSON array.")

    if records:
        first = records[0]
        if not isinstance(first, dict) or not first.get("id") or not (first.get("channel_id") or first.get("channelId")):
            raise MalformedInputError(
                f"Records in '{path}' do not seem to have 'id' and 'channel_id' properties."
            )

    return records
