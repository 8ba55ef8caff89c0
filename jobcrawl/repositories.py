"""Database access for stored job postings and sites."""

from __future__ import annotations

from contextlib import closing
from typing import Any, Iterable

from jobcrawl.models import PostInsert, Site

_SELECT_POST_IDS = "SELECT s.name, p.post_id FROM posts p JOIN sites s ON p.site_id = s.id"
_INSERT_POST = (
    "INSERT INTO posts (post_id, url, title, company_name, site_id, created_at, updated_at) "
    "VALUES (%s, %s, %s, %s, %s, NOW(), NOW())"
)
_SELECT_SITES = "SELECT id, name FROM sites"
_INSERT_SITE = (
    "INSERT INTO sites(name, created_at, updated_at) "
    "VALUES(%s, NOW(), NOW()) "
    "ON DUPLICATE KEY UPDATE updated_at = NOW()"
)


def _fetch_all(connection: Any, sql: str) -> list[tuple]:
    with closing(connection.cursor()) as cursor:
        cursor.execute(sql)
        return list(cursor.fetchall())


def _execute_in_transaction(connection: Any, sql: str, rows: Iterable[tuple]) -> None:
    """Run ``sql`` once per row and commit; roll back and re-raise on failure."""
    try:
        with closing(connection.cursor()) as cursor:
            for row in rows:
                cursor.execute(sql, row)
    except Exception:
        connection.rollback()
        raise
    connection.commit()


class PostRepository:
    """Reads and writes the ``posts`` table."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def get_all_post_ids_with_site(self) -> dict[str, set[str]]:
        """Return the stored post ids grouped by site name."""
        site_posts: dict[str, set[str]] = {}
        for site_name, post_id in _fetch_all(self.connection, _SELECT_POST_IDS):
            site_posts.setdefault(site_name, set()).add(post_id)
        return site_posts

    def insert_posts(self, posts: Iterable[PostInsert]) -> None:
        """Insert the posts in one transaction."""
        _execute_in_transaction(
            self.connection,
            _INSERT_POST,
            ((p.post_id, p.url, p.title, p.company_name, p.site_id) for p in posts),
        )


class SiteRepository:
    """Reads and writes the ``sites`` table."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def get_all_sites(self) -> list[Site]:
        """Return every stored site."""
        return [Site(id=site_id, name=name) for site_id, name in _fetch_all(self.connection, _SELECT_SITES)]

    def insert_sites(self, names: Iterable[str]) -> None:
        """Insert the named sites, touching ``updated_at`` of ones already stored."""
        _execute_in_transaction(self.connection, _INSERT_SITE, ((name,) for name in names))