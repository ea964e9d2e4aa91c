"""Content collection: models, frontmatter parsing, validation, loading and queries."""

from postshelf.content.loader import load_collection, scan_directory
from postshelf.content.models import (
    Collection,
    ContentEntry,
    LoadFailure,
    LoadResult,
    PostMetadata,
)
from postshelf.content.query import get, list_by_tag, list_published, tag_counts

__all__ = [
    "Collection",
    "ContentEntry",
    "LoadFailure",
    "LoadResult",
    "PostMetadata",
    "get",
    "list_by_tag",
    "list_published",
    "load_collection",
    "scan_directory",
    "tag_counts",
]
