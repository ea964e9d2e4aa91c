"""Error taxonomy for content loading.

Per-file errors are collected by the loader and reported alongside the
entries that loaded cleanly; only collection-wide problems are raised
straight out of a load call.

Errors compare by type and identifying fields, so
``MissingRequiredField("pubDate") == MissingRequiredField("pubDate")``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postshelf.content.models import LoadFailure


class ContentError(Exception):
    """Base error for anything that prevents a post from loading."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    @property
    def code(self) -> str:
        """Stable taxonomy name, e.g. ``"MissingFrontmatter"``."""
        return type(self).__name__

    def _identity(self) -> tuple[object, ...]:
        return (self.reason,)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._identity() == other._identity()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._identity()))


class MissingFrontmatter(ContentError):
    """The file does not open with a frontmatter delimiter."""

    def __init__(self, reason: str = "file does not start with a '---' frontmatter block") -> None:
        super().__init__(reason)

    def _identity(self) -> tuple[object, ...]:
        return ()


class MalformedFrontmatter(ContentError):
    """The frontmatter block exists but cannot be parsed.

    ``line`` and ``column`` are 1-based positions in the whole file when
    the underlying parser reports them.
    """

    def __init__(
        self,
        reason: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(reason)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.reason
        if self.column is None:
            return f"{self.reason} (line {self.line})"
        return f"{self.reason} (line {self.line}, column {self.column})"

    def _identity(self) -> tuple[object, ...]:
        return (self.line, self.column)


class MissingRequiredField(ContentError):
    """A required metadata key is absent, null, or blank."""

    def __init__(self, field: str) -> None:
        super().__init__(f"missing required field {field!r}")
        self.field = field

    def _identity(self) -> tuple[object, ...]:
        return (self.field,)


class TypeMismatch(ContentError):
    """A metadata value has the wrong type or cannot be read as one."""

    def __init__(self, field: str, reason: str = "") -> None:
        message = f"field {field!r} has the wrong type"
        if reason:
            message = f"field {field!r}: {reason}"
        super().__init__(message)
        self.field = field

    def _identity(self) -> tuple[object, ...]:
        return (self.field,)


class DuplicateId(ContentError):
    """Two or more files resolve to the same entry id."""

    def __init__(self, entry_id: str, paths: Sequence[str] = ()) -> None:
        message = f"duplicate id {entry_id!r}"
        if paths:
            message = f"{message} ({', '.join(paths)})"
        super().__init__(message)
        self.entry_id = entry_id
        self.paths = tuple(paths)

    def _identity(self) -> tuple[object, ...]:
        return (self.entry_id,)


class UnreadableFile(ContentError):
    """The file could not be read as UTF-8 text."""


class ContentDirectoryNotFound(ContentError):
    """The content root does not exist or is not a directory."""

    def __init__(self, directory: str) -> None:
        super().__init__(f"content directory not found: {directory}")
        self.directory = directory

    def _identity(self) -> tuple[object, ...]:
        return (self.directory,)


class CollectionLoadError(ContentError):
    """Raised by a strict load when any file failed.

    Carries every failure so the build can report all offending posts at
    once instead of stopping at the first.
    """

    def __init__(self, failures: Sequence[LoadFailure]) -> None:
        self.failures = tuple(failures)
        lines = [f"{len(self.failures)} content file(s) failed to load:"]
        lines.extend(f"  - {f.id}: [{f.error.code}] {f.error}" for f in self.failures)
        super().__init__("\n".join(lines))

    def _identity(self) -> tuple[object, ...]:
        return self.failures
