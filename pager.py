# pager.py
import logging
import time
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set

from config import PAGE_SIZE

logger = logging.getLogger(__name__)


@dataclass
class Page:
    ids: List[str] = field(default_factory=list)
    next_page_token: Optional[str] = None
    estimate: Optional[int] = None
    # ids listed again after an earlier page already handed them out
    repeated: int = 0


class MessagePager:
    """Walks the result pages of a Gmail query, one list call at a time.

    The page token is kept between calls. Each id is handed out once per run:
    messages that failed to trash still match the query and are dropped when
    they are listed again. Iteration stops on the first page left without
    ids, unless that page only held repeats and a further page is pending.
    The estimate never decides that.
    """

    def __init__(self, client, query: str, stats, timers: bool = False, page_size: int = PAGE_SIZE):
        self.client = client
        self.query = query
        self.stats = stats
        self.timers = timers
        self.page_size = page_size
        self.page_token: Optional[str] = None
        self.seen: Set[str] = set()

    def fetch_page(self) -> Page:
        start = time.perf_counter()
        data = self.client.list_message_ids_page(
            query=self.query,
            page_token=self.page_token,
            max_results=self.page_size,
        )
        if self.timers:
            self.stats.fetch_seconds += time.perf_counter() - start
        self.stats.pages += 1

        self.page_token = data.get("next_page_token")
        listed = list(data.get("message_ids") or [])
        fresh = []
        for mid in listed:
            if mid not in self.seen:
                self.seen.add(mid)
                fresh.append(mid)
        page = Page(
            ids=fresh,
            next_page_token=self.page_token,
            estimate=data.get("result_size_estimate"),
            repeated=len(listed) - len(fresh),
        )
        logger.debug("Fetched %d ids, %d already attempted (next page token: %s)",
                     len(page.ids), page.repeated, bool(page.next_page_token))
        return page

    def pages(self, first: Optional[Page] = None) -> Iterator[Page]:
        """Yield non-empty pages until the query is exhausted; ``first`` is yielded before fetching."""
        page = first if first is not None else self.fetch_page()
        while page.ids or (page.repeated and page.next_page_token):
            if page.ids:
                yield page
            page = self.fetch_page()
