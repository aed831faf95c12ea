# gdelete.py
"""Trash every Gmail message matching a search query.

The query has to be scoped by sender (``from:``) and date (``before:``)
unless explicitly relaxed. Google's estimate of the match count is shown and
nothing is touched until the user answers ``y``.
"""
import argparse
import logging
import signal

from config import CONFIRMATION_TOKEN
from delete_worker import DeleteWorker, RunStats
from gmail_client import TRANSPORT_ERRORS, GmailClient
from pager import MessagePager
from query_guard import GuardError, validate
from utils import CancelToken, format_seconds

logger = logging.getLogger("gdelete")


class ConfirmationDeclined(Exception):
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gdelete", description="Move Gmail messages matching a query to Trash.")
    parser.add_argument("-q", "--query", default="", help="Gmail search query, e.g. 'from:x@y.com before:2020/01/01'")
    parser.add_argument("-f", "--no-from", action="store_true", help="Allow no from: filter")
    parser.add_argument("-b", "--no-before", action="store_true", help="Allow no before: filter")
    parser.add_argument("-t", "--timers", action="store_true", help="Report time spent listing and deleting")
    parser.add_argument("-i", "--no-batch", action="store_true", help="Trash messages one request at a time")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logs")
    return parser


def setup_logger(verbose: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)5s %(message)s",
        level=logging.DEBUG if verbose else logging.INFO,
    )
    # discovery and oauth chatter is only useful when debugging them
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def confirm(input_fn=input) -> None:
    print(f"Are you sure you want to delete all of these? '{CONFIRMATION_TOKEN}' to continue")
    try:
        answer = input_fn()
    except EOFError:
        answer = ""
    if answer.strip() != CONFIRMATION_TOKEN:
        raise ConfirmationDeclined("Aborted.")


def print_summary(stats: RunStats, timers: bool) -> None:
    print(f"Total deleted {stats.deleted}")
    if stats.failed:
        print(f"Failed {stats.failed}")
    if timers:
        print(f"Fetch time {format_seconds(stats.fetch_seconds)} over {stats.pages} page(s), "
              f"delete time {format_seconds(stats.delete_seconds)}")


def run(args, client_factory=GmailClient, input_fn=input, cancel=None) -> int:
    """Validate, estimate, confirm, then trash page after page. Returns the exit code."""
    try:
        validate(args.query, allow_no_sender=args.no_from, allow_no_date_bound=args.no_before)
    except GuardError as e:
        print(e)
        return 1

    client = client_factory()
    stats = RunStats()
    pager = MessagePager(client, args.query, stats, timers=args.timers)
    worker = DeleteWorker(client, stats, batched=not args.no_batch, timers=args.timers, cancel=cancel)

    first = pager.fetch_page()
    if first.estimate is None:
        print("Google's estimate of how many messages match this query is unknown.")
    else:
        print(f"Google's estimate is that approximately {first.estimate} messages match this query.")

    try:
        confirm(input_fn)
    except ConfirmationDeclined as e:
        print(e)
        return 1

    previous_handler = cancel.install() if cancel is not None else None
    try:
        for page in pager.pages(first):
            worker.drain(page.ids)
            logger.info(worker.report())
            if cancel is not None and cancel.cancelled:
                break
    except KeyboardInterrupt:
        print("Exiting")
        print_summary(stats, args.timers)
        return 1
    except TRANSPORT_ERRORS as error:
        logger.error("Gmail request failed: %s", error)
        print_summary(stats, args.timers)
        return 1
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    if cancel is not None and cancel.cancelled:
        print("Exiting")
        print_summary(stats, args.timers)
        return 1

    print("All done.")
    print_summary(stats, args.timers)
    return 0


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    setup_logger(args.verbose)
    try:
        code = run(args, cancel=CancelToken())
    except KeyboardInterrupt:
        print("Exiting")
        code = 1
    except FileNotFoundError as error:
        logger.error("Missing file: %s", error.filename)
        code = 1
    except TRANSPORT_ERRORS as error:
        logger.error("Gmail request failed: %s", error)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
