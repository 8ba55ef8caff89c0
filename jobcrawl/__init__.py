"""Crawl Korean job boards for Go postings, store new ones in MySQL and mail a digest."""

__version__ = "0.1.0"