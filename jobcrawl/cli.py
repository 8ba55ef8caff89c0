"""Command that crawls job sites, stores new postings and mails them."""

from __future__ import annotations

import argparse
import logging
import os
import smtplib
import sys
import time
from contextlib import ExitStack, closing

import pymysql
import requests
import yaml

from jobcrawl.config import load_config
from jobcrawl.crawl_service import CrawlService
from jobcrawl.crawlers import (
    IncruitCrawler,
    InThisWorkCrawler,
    JobKoreaCrawler,
    SaraminCrawler,
)
from jobcrawl.database import SecretError, initialize
from jobcrawl.mail_service import MailService, NoPostsError
from jobcrawl.post_service import PostService
from jobcrawl.repositories import PostRepository, SiteRepository

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Run one crawl; the environment comes from ``APP_ENV`` (default ``local``)."""
    parser = argparse.ArgumentParser(
        prog="jobcrawl",
        description="Crawl job sites for Go postings, store new ones and mail them. "
        "The configuration is read from config/config.<APP_ENV>.yml.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    env = os.environ.get("APP_ENV") or "local"
    try:
        cfg = load_config(env)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(exc, file=sys.stderr)
        return 1
    started = time.perf_counter()

    try:
        connection = initialize(cfg)
    except (pymysql.MySQLError, SecretError, ValueError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1

    with closing(connection), ExitStack() as stack:
        sessions = [stack.enter_context(requests.Session()) for _ in range(4)]
        crawl_service = CrawlService(
            SaraminCrawler(sessions[0]),
            JobKoreaCrawler(sessions[1]),
            IncruitCrawler(sessions[2]),
            InThisWorkCrawler(sessions[3]),
        )
        posts = crawl_service.crawl()

        post_service = PostService(PostRepository(connection), SiteRepository(connection))
        try:
            new_posts = post_service.create_new_posts(posts)
        except pymysql.MySQLError:
            logger.exception("Failed to store new posts")
            new_posts = []

    try:
        MailService(new_posts, cfg).send_mail()
    except (NoPostsError, smtplib.SMTPException, OSError, ValueError) as exc:
        print(exc)
        return 0

    print(f"Total time: {time.perf_counter() - started:.3f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())