"""Discover, parse and validate every post in a content directory.

A load is a single batch pass. Each file is read, split and validated on
its own, so the per-file work runs on a thread pool; the only shared step
is the final fold of results into a Collection and a list of failures.
Nothing is cached between loads.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from postshelf.content.frontmatter import split_frontmatter
from postshelf.content.models import Collection, ContentEntry, LoadFailure, LoadResult
from postshelf.content.schema import validate_metadata
from postshelf.errors import (
    ContentDirectoryNotFound,
    ContentError,
    DuplicateId,
    UnreadableFile,
)

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md", ".mdx")


def _is_ignored(name: str) -> bool:
    """Partials (``_foo.md``) and hidden files are never content."""
    return name.startswith(("_", "."))


def discover_files(
    directory: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    recursive: bool = False,
) -> list[Path]:
    """Return content files under ``directory`` sorted by relative path.

    Raises:
        ContentDirectoryNotFound: ``directory`` is missing or not a directory.
    """
    if not directory.is_dir():
        raise ContentDirectoryNotFound(str(directory))

    suffixes = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    candidates = directory.rglob("*") if recursive else directory.iterdir()

    found: list[Path] = []
    for path in candidates:
        relative = path.relative_to(directory)
        if any(_is_ignored(part) for part in relative.parts):
            continue
        if path.is_file() and path.suffix.lower() in suffixes:
            found.append(path)

    return sorted(found, key=lambda p: p.relative_to(directory).as_posix())


def entry_id_for(path: Path, root: Path) -> str:
    """Slug for a file: its path relative to ``root`` without the extension."""
    return path.relative_to(root).with_suffix("").as_posix()


def load_entry(path: Path, root: Path) -> ContentEntry:
    """Read, split and validate a single content file.

    Raises:
        ContentError: Any per-file problem (see postshelf.errors).
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise UnreadableFile(f"not valid UTF-8: {exc.reason}") from exc
    except OSError as exc:
        raise UnreadableFile(exc.strerror or str(exc)) from exc

    raw, body = split_frontmatter(text)
    metadata = validate_metadata(raw)
    return ContentEntry(
        id=entry_id_for(path, root),
        metadata=metadata,
        body=body,
        source_path=path.relative_to(root).as_posix(),
    )


def _load_one(path: Path, root: Path) -> ContentEntry | LoadFailure:
    entry_id = entry_id_for(path, root)
    try:
        entry = load_entry(path, root)
    except ContentError as exc:
        return LoadFailure(id=entry_id, path=path.relative_to(root).as_posix(), error=exc)
    logger.debug("Loaded %s", entry_id)
    return entry


def scan_directory(
    directory: str | Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    recursive: bool = False,
    max_workers: int | None = None,
) -> LoadResult:
    """Load every post in ``directory``, keeping successes and failures apart.

    Files whose ids collide are all rejected with DuplicateId and never
    parsed. A bad file never stops the others from loading.

    Args:
        directory: Content root.
        extensions: File extensions treated as content.
        recursive: Also descend into subdirectories.
        max_workers: Thread pool size; ``1`` loads sequentially.

    Raises:
        ContentDirectoryNotFound: The content root does not exist.
    """
    root = Path(directory)
    paths = discover_files(root, extensions=extensions, recursive=recursive)

    by_id: dict[str, list[Path]] = defaultdict(list)
    for path in paths:
        by_id[entry_id_for(path, root)].append(path)

    failures: list[LoadFailure] = []
    unique: list[Path] = []
    for entry_id, group in by_id.items():
        if len(group) == 1:
            unique.append(group[0])
            continue
        rel_paths = [p.relative_to(root).as_posix() for p in group]
        logger.error("Duplicate id %r from %s", entry_id, ", ".join(rel_paths))
        error = DuplicateId(entry_id, rel_paths)
        failures.extend(LoadFailure(id=entry_id, path=rel, error=error) for rel in rel_paths)

    if max_workers == 1 or len(unique) <= 1:
        results = [_load_one(path, root) for path in unique]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(lambda p: _load_one(p, root), unique))

    entries: list[ContentEntry] = []
    for result in results:
        if isinstance(result, LoadFailure):
            failures.append(result)
        else:
            entries.append(result)

    failures.sort(key=lambda f: f.path)
    logger.info(
        "Loaded %d entries from %s (%d failed)", len(entries), root, len(failures)
    )
    return LoadResult(collection=Collection(entries), failures=tuple(failures))


def load_collection(
    directory: str | Path,
    *,
    strict: bool = True,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    recursive: bool = False,
    max_workers: int | None = None,
) -> Collection:
    """Load a content directory and return only the valid entries.

    In strict mode any failure aborts the load with a CollectionLoadError
    listing every offending file. Otherwise failures are logged and the
    offending files are left out.

    Raises:
        CollectionLoadError: Strict mode and at least one file failed.
        ContentDirectoryNotFound: The content root does not exist.
    """
    result = scan_directory(
        directory,
        extensions=extensions,
        recursive=recursive,
        max_workers=max_workers,
    )
    if strict:
        result.raise_for_failures()
        return result.collection

    for failure in result.failures:
        level = logging.ERROR if isinstance(failure.error, DuplicateId) else logging.WARNING
        logger.log(
            level,
            "Skipping %s: [%s] %s",
            failure.path,
            failure.error.code,
            failure.error,
        )
    return result.collection
