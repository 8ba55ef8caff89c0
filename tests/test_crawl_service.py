import threading

import pytest

from jobcrawl.crawl_service import CrawlService, Crawler
from jobcrawl.models import PostRequest


class ListCrawler(Crawler):
    def __init__(self, posts):
        self.posts = posts

    def crawl(self):
        return list(self.posts)


class FailingCrawler(Crawler):
    def crawl(self):
        raise RuntimeError("site unreachable")


class BarrierCrawler(Crawler):
    def __init__(self, barrier, post):
        self.barrier = barrier
        self.post = post

    def crawl(self):
        self.barrier.wait(timeout=5)
        return [self.post]


def post(post_id, site):
    return PostRequest(post_id, f"https://{site}.example.com/{post_id}", "Title", "Company", site)


def test_collects_from_all_crawlers():
    first = [post("1", "saramin"), post("2", "saramin")]
    second = [post("9", "incruit")]
    result = CrawlService(ListCrawler(first), ListCrawler(second)).crawl()
    assert result == first + second


def test_failing_crawler_is_skipped():
    good = [post("3", "jobkorea")]
    result = CrawlService(FailingCrawler(), ListCrawler(good)).crawl()
    assert result == good


def test_no_crawlers_gives_empty_list():
    assert CrawlService().crawl() == []


def test_crawlers_run_concurrently():
    barrier = threading.Barrier(2)
    a, b = post("1", "saramin"), post("2", "incruit")
    result = CrawlService(BarrierCrawler(barrier, a), BarrierCrawler(barrier, b)).crawl()
    assert sorted(result, key=lambda p: p.post_id) == [a, b]


def test_crawler_is_abstract():
    with pytest.raises(TypeError):
        Crawler()