"""Content domain models.

A post is loaded once from its source file into an immutable
ContentEntry. Entries are gathered into a Collection, which is the only
value handed to renderers: there is no process-wide content cache, a
fresh load produces a fresh Collection.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from postshelf.errors import CollectionLoadError, ContentError, DuplicateId


class PostMetadata(BaseModel):
    """Validated frontmatter of a single post."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    description: str
    pub_date: date = Field(alias="pubDate")
    updated_date: date | None = Field(default=None, alias="updatedDate")
    tags: tuple[str, ...] = ()
    draft: bool = False

    @field_validator("title", "description")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        tags = tuple(tag.strip().lower() for tag in value)
        if not all(tags):
            raise ValueError("tags must not be empty")
        return tags


class ContentEntry(BaseModel):
    """One post: its id, validated metadata and raw body."""

    model_config = ConfigDict(frozen=True)

    id: str
    metadata: PostMetadata
    body: str = ""
    source_path: str = ""

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def pub_date(self) -> date:
        return self.metadata.pub_date

    @property
    def tags(self) -> tuple[str, ...]:
        return self.metadata.tags

    @property
    def draft(self) -> bool:
        return self.metadata.draft


class Collection:
    """Immutable set of entries keyed by id, iterated in id order.

    Raises DuplicateId on construction if two entries share an id.
    """

    __slots__ = ("_entries", "_by_id")

    def __init__(self, entries: Iterable[ContentEntry] = ()) -> None:
        by_id: dict[str, ContentEntry] = {}
        for entry in entries:
            if entry.id in by_id:
                raise DuplicateId(
                    entry.id, (by_id[entry.id].source_path, entry.source_path)
                )
            by_id[entry.id] = entry
        self._entries = tuple(by_id[key] for key in sorted(by_id))
        self._by_id = MappingProxyType(by_id)

    @property
    def entries(self) -> tuple[ContentEntry, ...]:
        return self._entries

    @property
    def by_id(self) -> Mapping[str, ContentEntry]:
        """Read-only id to entry mapping."""
        return self._by_id

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(e.id for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ContentEntry]:
        return iter(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"Collection({len(self._entries)} entries)"

    # ── Queries ──────────────────────────────────────────────────

    def get(self, entry_id: str) -> ContentEntry | None:
        """Return the entry with this id, or None if there is none."""
        from postshelf.content.query import get

        return get(self, entry_id)

    def list_published(self, *, include_drafts: bool = False) -> list[ContentEntry]:
        from postshelf.content.query import list_published

        return list_published(self, include_drafts=include_drafts)

    def list_by_tag(self, tag: str, *, include_drafts: bool = False) -> list[ContentEntry]:
        from postshelf.content.query import list_by_tag

        return list_by_tag(self, tag, include_drafts=include_drafts)

    def tags(self) -> dict[str, int]:
        from postshelf.content.query import tag_counts

        return tag_counts(self)


@dataclass(frozen=True)
class LoadFailure:
    """A file that did not make it into the collection, and why."""

    id: str
    path: str
    error: ContentError


@dataclass(frozen=True)
class LoadResult:
    """Outcome of scanning a content directory.

    Successes and failures are kept apart; callers decide whether any
    failure is fatal.
    """

    collection: Collection = field(default_factory=Collection)
    failures: tuple[LoadFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def duplicates(self) -> tuple[LoadFailure, ...]:
        return tuple(f for f in self.failures if isinstance(f.error, DuplicateId))

    def raise_for_failures(self) -> None:
        """Raise CollectionLoadError if any file failed to load."""
        if self.failures:
            raise CollectionLoadError(self.failures)
