"""
purger.cli — ``purger collect`` and ``purger delete`` entry points.
"""

import argparse
import sys
import time
from dataclasses import replace
from typing import Optional

from dotenv import load_dotenv

from purger.collect import Collector
from purger.config import Settings, load_settings
from purger.delete import BulkMutator
from purger.errors import PurgerError
from purger.headers import build_headers
from purger.observability import (
    evaluate_alerts,
    finish_run,
    record_collection,
    record_deletion,
    start_run,
)
from purger.report import failures_frame, tally_frame, write_failure_report
from purger.storage import load_records, save_records
from purger.throttle import BOT_TOKEN_PREFIX

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABORTED = 2

USER_TOKEN_WARNING = (
    "\n******************** WARNING ********************\n"
    "The provided DISCORD_TOKEN does not appear to be a Bot token.\n"
    "Automating user accounts (self-botting) is against Discord's Terms of\n"
    "Service and can lead to account termination. Proceed with caution.\n"
    "THERE IS NO UNDO FOR DELETED MESSAGES.\n"
    "*************************************************\n"
)


def looks_like_bot_token(token: str) -> bool:
    return token.startswith(BOT_TOKEN_PREFIX)


def warn_if_user_token(settings: Settings) -> None:
    """Print the self-bot warning and pause long enough for it to be read."""
    if looks_like_bot_token(settings.token):
        return
    print(USER_TOKEN_WARNING)
    if settings.user_token_delay > 0:
        time.sleep(settings.user_token_delay)


def confirm_deletion(count: int, settings: Settings) -> None:
    print(f"!!! ENSURE YOU WANT TO DELETE THESE {count} MESSAGES !!!")
    if settings.confirm_delay > 0:
        print(f"Deletion will start in {settings.confirm_delay:g} seconds... Press Ctrl+C to abort.")
        time.sleep(settings.confirm_delay)


def _print_alerts(alerts: list[dict]) -> None:
    for alert in alerts:
        print(f"  [{alert['severity']}] {alert['message']}")


def run_collect(settings: Settings, output: str) -> int:
    settings.require_search_scope()
    warn_if_user_token(settings)

    print(f"Starting message fetch for author {settings.author_id} in guild {settings.guild_id}...")
    metrics = start_run("collect")
    collector = Collector(settings, build_headers(settings.token))
    records = collector.collect()
    finish_run(record_collection(metrics, collector, records))

    print(f"\nTotal messages fetched: {len(records)}")
    if records:
        save_records(records, output)
        print(f"Saved {len(records)} messages to {output}")
    else:
        print("No messages were found for the specified author in this guild.")

    _print_alerts(evaluate_alerts(metrics))
    return EXIT_OK


def run_delete(settings: Settings, input_path: str, failure_report: Optional[str] = None) -> int:
    settings.require_token()
    warn_if_user_token(settings)

    print(f"Reading messages from {input_path}...")
    records = load_records(input_path)
    print(f"Found {len(records)} messages to potentially delete.")
    if not records:
        print("No messages found in the file. Exiting.")
        return EXIT_OK

    print("\n--- Starting Deletion Process ---")
    confirm_deletion(len(records), settings)

    metrics = start_run("delete")
    mutator = BulkMutator(settings, build_headers(settings.token))
    run = mutator.run(records)
    finish_run(record_deletion(metrics, run))

    print("\n--- Deletion Process Finished ---")
    print(tally_frame(run.tally).to_string(index=False))
    if run.failures:
        print("\nFailures:")
        print(failures_frame(run.failures).to_string(index=False))
        if failure_report:
            write_failure_report(run.failures, failure_report)
            print(f"Failure report written to {failure_report}")

    _print_alerts(evaluate_alerts(metrics))
    return EXIT_ABORTED if run.aborted else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="purger",
        description="Find and delete your messages in a Discord guild, respecting rate limits.",
    )
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: search upward from cwd).")
    sub = parser.add_subparsers(dest="command", required=True)

    collect = sub.add_parser("collect", help="Search the guild and save matching messages to a JSON file.")
    collect.add_argument("--output", default=None, help="Record file to write (default: RECORDS_FILE).")
    collect.add_argument("--yes", action="store_true", help="Skip the confirmation pauses.")

    delete = sub.add_parser("delete", help="Delete every message listed in a record file.")
    delete.add_argument("--input", default=None, help="Record file to read (default: RECORDS_FILE).")
    delete.add_argument("--failure-report", default=None, help="Write failed deletions to this CSV file.")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation pauses.")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file, override=False)

    try:
        settings = load_settings()
        if args.yes:
            settings = replace(settings, user_token_delay=0, confirm_delay=0)

        if args.command == "collect":
            return run_collect(settings, args.output or settings.records_file)
        return run_delete(settings, args.input or settings.records_file, args.failure_report)
    except PurgerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
