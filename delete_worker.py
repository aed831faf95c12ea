# delete_worker.py
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from config import BATCH_SIZE
from gmail_client import HTTP_OK
from utils import format_seconds, take_group

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    """Running totals for one gdelete run. Counters only ever go up."""
    deleted: int = 0
    failed: int = 0
    pages: int = 0
    fetch_seconds: float = 0.0
    delete_seconds: float = 0.0


class DeleteWorker:
    """Trashes pending message ids, either grouped into batch requests or one by one.

    Failed items are logged with their request parameters and are not retried.
    """

    def __init__(self, gmail_client, stats: RunStats, batch_size: int = BATCH_SIZE,
                 batched: bool = True, timers: bool = False, cancel=None):
        self.gmail_client = gmail_client
        self.stats = stats
        self.batch_size = batch_size
        self.batched = batched
        self.timers = timers
        self.cancel = cancel

    def _cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.cancelled

    def _record(self, message_id: str, status: Optional[int]) -> None:
        if status == HTTP_OK:
            self.stats.deleted += 1
        else:
            self.stats.failed += 1
            logger.warning("%s => %s", self.gmail_client.request_params(message_id), status)

    def drain(self, message_ids: List[str]) -> None:
        """Submit every id in message_ids for trashing, emptying the list.

        When a cancel token fires, draining stops at the next group (or item)
        boundary and the remaining ids are left in the list.
        """
        if self.batched:
            self._drain_batched(message_ids)
        else:
            self._drain_individually(message_ids)

    def _drain_batched(self, message_ids: List[str]) -> None:
        while message_ids and not self._cancelled():
            group = take_group(message_ids, self.batch_size)
            start = time.perf_counter()
            results = self.gmail_client.trash_batch(group)
            if self.timers:
                self.stats.delete_seconds += time.perf_counter() - start

            # Ids the response skipped count as failures.
            reported = {mid for mid, _ in results}
            for mid, status in results:
                self._record(mid, status)
            for mid in group:
                if mid not in reported:
                    self._record(mid, None)

    def _drain_individually(self, message_ids: List[str]) -> None:
        while message_ids and not self._cancelled():
            mid = message_ids.pop(0)
            start = time.perf_counter()
            status = self.gmail_client.trash(mid)
            if status == HTTP_OK and self.timers:
                self.stats.delete_seconds += time.perf_counter() - start
            self._record(mid, status)

    def report(self) -> str:
        line = f"Total deleted {self.stats.deleted}"
        if self.timers:
            line += f" (delete time {format_seconds(self.stats.delete_seconds)})"
        return line
