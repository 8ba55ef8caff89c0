"""Runs several crawlers at once and gathers their postings."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

from jobcrawl.models import PostRequest

logger = logging.getLogger(__name__)


class Crawler(ABC):
    """Something that collects job postings from one site."""

    @abstractmethod
    def crawl(self) -> list[PostRequest]:
        """Return the postings found."""


class CrawlService:
    """Runs its crawlers concurrently."""

    def __init__(self, *crawlers: Crawler) -> None:
        self.crawlers = list(crawlers)

    def crawl(self) -> list[PostRequest]:
        """Return the postings of every crawler; a failing crawler contributes none."""
        started = time.perf_counter()
        results: list[PostRequest] = []
        if self.crawlers:
            with ThreadPoolExecutor(max_workers=len(self.crawlers)) as pool:
                futures = [pool.submit(crawler.crawl) for crawler in self.crawlers]
                for future in futures:
                    try:
                        results.extend(future.result())
                    except Exception:
                        logger.exception("Crawler failed")
        logger.info("Crawling time: %.3fs", time.perf_counter() - started)
        return results