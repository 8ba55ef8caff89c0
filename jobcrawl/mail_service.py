"""Notification mail listing newly found postings."""

from __future__ import annotations

import logging
import smtplib
import time
from datetime import datetime
from itertools import groupby
from typing import Iterable

from jobcrawl.config import Config
from jobcrawl.models import PostRequest

logger = logging.getLogger(__name__)


class NoPostsError(Exception):
    """There is nothing to mail."""


class MailService:
    """Formats and sends the list of new postings, grouped by site."""

    def __init__(self, posts: Iterable[PostRequest], config: Config) -> None:
        self.posts = sorted(posts, key=lambda post: post.site_name)
        self.config = config

    def build_message(self, now: datetime | None = None) -> str:
        """Return the full mail text; raise NoPostsError when there are no posts."""
        if not self.posts:
            raise NoPostsError("No posts found")
        stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M")
        subject = f"Subject: JobGo Finds New JobPosts! [{stamp}]\n\n"
        lines = []
        for site_name, posts in groupby(self.posts, key=lambda post: post.site_name):
            lines.append(f"{site_name.upper()}\n")
            for post in posts:
                lines.append(f"{post.company_name}  |  {post.title}\n")
                lines.append(f"{post.url}\n\n")
        return subject + "\n" + "".join(lines)

    def send_mail(self) -> bytes:
        """Send the mail to the configured receiver over SMTP; return the message sent."""
        started = time.perf_counter()
        mail = self.config.mail
        message = self.build_message().encode("utf-8")
        with smtplib.SMTP(mail.smtp_host, int(mail.smtp_port)) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
            smtp.login(mail.sender, mail.password)
            smtp.sendmail(mail.sender, [mail.receiver], message)
        logger.info("Email sent successfully!")
        logger.info("Mail process took: %.3fs", time.perf_counter() - started)
        return message