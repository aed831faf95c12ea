# query_guard.py
import re
from typing import Optional

SENDER_TOKEN = re.compile(r"\bfrom:")
DATE_BOUND_TOKEN = re.compile(r"\bbefore:")


class GuardError(Exception):
    """Query is too broad to delete from safely."""


class MissingSenderFilter(GuardError):
    def __init__(self):
        super().__init__(
            "The query must contain a from: filter for safety (you might cautiously use --no-from)"
        )


class MissingDateFilter(GuardError):
    def __init__(self):
        super().__init__(
            "The query must contain a before: filter for safety (you might cautiously use --no-before)"
        )


def validate(query: Optional[str], allow_no_sender: bool = False, allow_no_date_bound: bool = False) -> None:
    """Raise a GuardError unless query is scoped by sender and date."""
    query = query or ""
    if not allow_no_sender and not SENDER_TOKEN.search(query):
        raise MissingSenderFilter()
    if not allow_no_date_bound and not DATE_BOUND_TOKEN.search(query):
        raise MissingDateFilter()
