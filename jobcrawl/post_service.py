"""Selection and storage of postings not seen before."""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable

from jobcrawl.models import PostInsert, PostRequest

logger = logging.getLogger(__name__)


class PostService:
    """Stores newly crawled postings and reports which ones were new."""

    def __init__(self, post_repository: Any, site_repository: Any) -> None:
        self.post_repository = post_repository
        self.site_repository = site_repository

    def create_new_posts(self, posts: Iterable[PostRequest]) -> list[PostRequest]:
        """Insert unknown sites and unseen postings; return the postings inserted."""
        started = time.perf_counter()
        posts = list(posts)

        name_to_id, _ = self._site_maps()
        self._insert_new_sites(posts, name_to_id)
        name_to_id, id_to_name = self._site_maps()

        stored = self.post_repository.get_all_post_ids_with_site()
        new_posts = [
            post.to_insert(name_to_id[post.site_name])
            for post in posts
            if post.post_id not in stored.get(post.site_name, ())
            and post.site_name in name_to_id
        ]

        logger.info("New posts count: %d", len(new_posts))
        self.post_repository.insert_posts(new_posts)

        result = self._to_requests(new_posts, id_to_name)
        logger.info("create_new_posts time: %.3fs", time.perf_counter() - started)
        return result

    def _insert_new_sites(self, posts: list[PostRequest], name_to_id: dict[str, int]) -> None:
        new_sites = {post.site_name for post in posts if post.site_name not in name_to_id}
        logger.info("New sites count: %d", len(new_sites))
        if new_sites:
            self.site_repository.insert_sites(new_sites)

    def _site_maps(self) -> tuple[dict[str, int], dict[int, str]]:
        sites = self.site_repository.get_all_sites()
        logger.info("Sites count: %d", len(sites))
        name_to_id: dict[str, int] = {}
        id_to_name: dict[int, str] = {}
        for site in sites:
            name_to_id.setdefault(site.name, site.id)
            id_to_name.setdefault(site.id, site.name)
        return name_to_id, id_to_name

    @staticmethod
    def _to_requests(posts: list[PostInsert], id_to_name: dict[int, str]) -> list[PostRequest]:
        return [post.to_request(id_to_name[post.site_id]) for post in posts if post.site_id in id_to_name]