"""Read-only views over a Collection.

None of these functions mutate the collection; each returns a new list.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postshelf.content.models import Collection, ContentEntry


def _newest_first(entries: list[ContentEntry]) -> list[ContentEntry]:
    # Two stable sorts: id ascending, then date descending keeps id order on ties.
    ordered = sorted(entries, key=lambda e: e.id)
    ordered.sort(key=lambda e: e.pub_date, reverse=True)
    return ordered


def list_published(
    collection: Collection,
    *,
    include_drafts: bool = False,
) -> list[ContentEntry]:
    """Entries ordered by pubDate descending, ties by id ascending.

    Drafts are left out unless ``include_drafts`` is set.
    """
    entries = [e for e in collection if include_drafts or not e.draft]
    return _newest_first(entries)


def list_by_tag(
    collection: Collection,
    tag: str,
    *,
    include_drafts: bool = False,
) -> list[ContentEntry]:
    """Entries carrying ``tag`` (case-insensitive), in published order."""
    wanted = tag.strip().lower()
    return [
        e
        for e in list_published(collection, include_drafts=include_drafts)
        if wanted in e.tags
    ]


def get(collection: Collection, entry_id: str) -> ContentEntry | None:
    """Return the entry with this id, or None when it does not exist."""
    return collection.by_id.get(entry_id)


def tag_counts(collection: Collection) -> dict[str, int]:
    """Published entries per tag, most used first, then alphabetical."""
    counts: Counter[str] = Counter()
    for entry in list_published(collection):
        counts.update(set(entry.tags))
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))
