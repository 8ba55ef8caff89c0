"""Job posting and site records passed between crawlers, storage and mail."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PostRequest:
    """A job posting as found on a site, identified by the site's name."""

    post_id: str
    url: str
    title: str
    company_name: str
    site_name: str

    def to_insert(self, site_id: int) -> PostInsert:
        """Return the posting keyed by the stored site's id instead of its name."""
        return PostInsert(
            post_id=self.post_id,
            url=self.url,
            title=self.title,
            company_name=self.company_name,
            site_id=site_id,
        )


@dataclass(frozen=True)
class PostInsert:
    """A job posting ready to be stored, identified by the site's id."""

    post_id: str
    url: str
    title: str
    company_name: str
    site_id: int

    def to_request(self, site_name: str) -> PostRequest:
        """Return the posting keyed by the site's name instead of its id."""
        return PostRequest(
            post_id=self.post_id,
            url=self.url,
            title=self.title,
            company_name=self.company_name,
            site_name=site_name,
        )


@dataclass(frozen=True)
class Site:
    """A job site as stored in the database."""

    id: int
    name: str