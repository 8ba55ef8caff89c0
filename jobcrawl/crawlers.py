"""Crawlers that page through job-site search results and collect postings."""

from __future__ import annotations

import logging
import time
from abc import abstractmethod
from itertools import count
from typing import Iterable
from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup

from jobcrawl.crawl_service import Crawler
from jobcrawl.models import PostRequest

logger = logging.getLogger(__name__)

ParsedPage = tuple[list[PostRequest], bool]


def _soup(html: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class BaseCrawler(Crawler):
    """Visits result pages one after another until a site reports no more results.

    A page that cannot be fetched, or whose URL is outside the allowed domains,
    also ends the crawl; postings gathered so far are kept.
    """

    delay = 0.1
    timeout = 30.0

    def __init__(
        self,
        site: str,
        domains: Iterable[str],
        url: str,
        session: requests.Session | None = None,
    ) -> None:
        self.site = site
        self.domains = tuple(domains)
        self.url = url
        self.session = session if session is not None else requests.Session()

    def is_allowed(self, url: str) -> bool:
        """Return whether the URL's host is one of the crawler's domains."""
        host = urlsplit(url).hostname
        return host is not None and host in self.domains

    def page_url(self, index: int) -> str:
        """Return the URL of the result page numbered from 1."""
        return f"{self.url}{index}"

    @abstractmethod
    def parse_page(self, html: str | bytes) -> ParsedPage:
        """Return the postings on a page and whether it is the last page."""

    def crawl(self) -> list[PostRequest]:
        """Collect the postings of every result page."""
        logger.info("Crawling starts %s", self.domains[0])
        posts: list[PostRequest] = []
        for index in count(1):
            if index > 1 and self.delay:
                time.sleep(self.delay)
            url = self.page_url(index)
            if not self.is_allowed(url):
                logger.error("Forbidden domain: %s", url)
                break
            logger.info("Visiting %s", url)
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as exc:
                logger.error("%s", exc)
                break
            page_posts, last = self.parse_page(response.content)
            posts.extend(page_posts)
            if last:
                break
        logger.info("%s crawler done", self.site)
        logger.info("Crawling ends %s", self.domains[0])
        return posts

    def _post(self, post_id: str, url: str, title: str, company_name: str) -> PostRequest:
        return PostRequest(
            post_id=post_id,
            url=url,
            title=title,
            company_name=company_name,
            site_name=self.site,
        )


class SaraminCrawler(BaseCrawler):
    """Crawls the Go job category of saramin."""

    def __init__(self, session: requests.Session | None = None) -> None:
        super().__init__(
            "saramin",
            ("saramin.co.kr", "www.saramin.co.kr"),
            "https://www.saramin.co.kr/zf_user/jobs/list/job-category?cat_kewd=223&sort=RD&page=",
            session,
        )

    def parse_page(self, html: str | bytes) -> ParsedPage:
        soup = _soup(html)
        posts = []
        for item in soup.select("div.box_item"):
            post_id = link = title = company_name = ""
            for anchor in item.select("div.col.company_nm > a[href]"):
                company_name = anchor.get_text().replace("\n", "").strip()
                logger.debug("Company name: %r", company_name)
            for anchor in item.select("div.col.notification_info > div.job_tit > a.str_tit[href]"):
                link = f"https://{self.domains[0]}{anchor.get('href', '')}"
                post_id = str(anchor.get("id", "")).replace("rec_link_", "")
                title = anchor.get_text()
                logger.debug("Post %r: %r -> %s", post_id, title, link)
            posts.append(self._post(post_id, link, title, company_name))
        return posts, soup.select_one("div.info_empty") is not None


class JobKoreaCrawler(BaseCrawler):
    """Crawls the Go search results of jobkorea."""

    def __init__(self, session: requests.Session | None = None) -> None:
        super().__init__(
            "jobkorea",
            ("jobkorea.co.kr", "www.jobkorea.co.kr"),
            "https://www.jobkorea.co.kr/Search/?stext=go&ord=RelevanceDesc&tabType=recruit&Page_No=",
            session,
        )

    def parse_page(self, html: str | bytes) -> ParsedPage:
        soup = _soup(html)
        posts = []
        for item in soup.select("section.content-recruit.on > article.list > article.list-item"):
            post_id = str(item.get("data-gno", ""))
            link = title = company_name = ""
            for anchor in item.select("div.list-section-corp > a[href]"):
                company_name = anchor.get_text().replace("\n", "").strip()
            for anchor in item.select("div.information-title > a[href]"):
                title = anchor.get_text().replace("\n", "").strip()
                link = str(anchor.get("href", "")).strip()
                if link.startswith("/"):
                    link = "https://www.jobkorea.co.kr" + link
            logger.debug("Post %r: %r at %r -> %s", post_id, title, company_name, link)
            posts.append(self._post(post_id, link, title, company_name))
        last = soup.select_one("section.content-recruit > article.list-empty") is not None
        return posts, last


class IncruitCrawler(BaseCrawler):
    """Crawls the Go search results of incruit, thirty results per page."""

    page_size = 30

    def __init__(self, session: requests.Session | None = None) -> None:
        super().__init__(
            "incruit",
            ("incruit.com", "search.incruit.com"),
            "https://search.incruit.com/list/search.asp?col=job&kw=go&startno=",
            session,
        )

    def page_url(self, index: int) -> str:
        """Return the URL of the page numbered from 1, addressed by its first result."""
        return f"{self.url}{1 + self.page_size * (index - 1)}"

    def parse_page(self, html: str | bytes) -> ParsedPage:
        soup = _soup(html)
        rows = soup.select("ul.c_row")
        posts = []
        for row in rows:
            post_id = str(row.get("jobno", ""))
            link = title = company_name = ""
            for anchor in row.select("div.cell_first > div.cl_top > a[href]"):
                company_name = anchor.get_text().strip()
            for anchor in row.select("div.cell_mid > div.cl_top > a[href]"):
                title = anchor.get_text()
                link = str(anchor.get("href", ""))
            posts.append(self._post(post_id, link, title, company_name))
        return posts, not rows


class InThisWorkCrawler(BaseCrawler):
    """Crawls the Go search results of inthiswork."""

    _separator = "｜"

    def __init__(self, session: requests.Session | None = None) -> None:
        super().__init__(
            "inthiswork",
            ("inthiswork.com",),
            "https://inthiswork.com/page/%s?s=go",
            session,
        )

    def page_url(self, index: int) -> str:
        return self.url % index

    def parse_page(self, html: str | bytes) -> ParsedPage:
        soup = _soup(html)
        posts = []
        selector = (
            "div.fusion-posts-container.fusion-posts-container-pagination > article > div > div > div"
            " > h2.blog-shortcode-post-title.entry-title > a[href]"
        )
        for anchor in soup.select(selector):
            link = str(anchor.get("href", ""))
            text = anchor.get_text()
            logger.debug("Link found: %r -> %s", text, link)
            parts = text.split(self._separator)
            if len(parts) < 2:
                raise ValueError(f"post title {text!r} has no company part")
            posts.append(self._post(link.split("/")[-1], link, parts[0], parts[1]))
        last = any(
            "죄송합니다." in span.get_text()
            for span in soup.select("div.fusion-text.fusion-text-1 > p > strong > span")
        )
        return posts, last