"""
FeedCollector Ingestion Module
==============================

Turning URLs into normalized feeds.

This module handles:
- HTTP fetching of source documents
- RSS and Atom parsing into the unified feed model
- Feed candidate discovery in HTML pages
"""
