"""Tests for content discovery and collection loading."""

import logging
from datetime import date
from pathlib import Path

import pytest
from postshelf.content.loader import (
    discover_files,
    entry_id_for,
    load_collection,
    load_entry,
    scan_directory,
)
from postshelf.errors import (
    CollectionLoadError,
    ContentDirectoryNotFound,
    DuplicateId,
    MalformedFrontmatter,
    MissingFrontmatter,
    MissingRequiredField,
    TypeMismatch,
    UnreadableFile,
)


def _post(
    title: str = "Caching Docker layers",
    pub_date: str = "2024-02-14",
    tags: str = "[docker, ci]",
    draft: bool = False,
    body: str = "Order your COPY instructions from least to most volatile.\n",
) -> str:
    return (
        "---\n"
        f"title: {title}\n"
        "description: Faster CI builds.\n"
        f"pubDate: {pub_date}\n"
        f"tags: {tags}\n"
        f"draft: {str(draft).lower()}\n"
        "---\n"
        f"{body}"
    )


def _write(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture()
def blog_dir(tmp_path: Path) -> Path:
    content = tmp_path / "blog"
    _write(content, "docker-layers.md", _post())
    _write(content, "go-pools.mdx", _post(title="Go worker pools", pub_date="2024-03-01", tags="[go]"))
    _write(content, "wip.md", _post(title="Work in progress", draft=True))
    return content


class TestDiscoverFiles:
    def test_finds_md_and_mdx(self, blog_dir: Path):
        names = [p.name for p in discover_files(blog_dir)]
        assert names == ["docker-layers.md", "go-pools.mdx", "wip.md"]

    def test_ignores_other_extensions(self, blog_dir: Path):
        _write(blog_dir, "notes.txt", "not content")
        _write(blog_dir, "cover.png", "")
        assert len(discover_files(blog_dir)) == 3

    def test_extension_match_is_case_insensitive(self, blog_dir: Path):
        _write(blog_dir, "LOUD.MD", _post())
        assert "LOUD.MD" in [p.name for p in discover_files(blog_dir)]

    def test_skips_partials_and_hidden_files(self, blog_dir: Path):
        _write(blog_dir, "_partial.md", "shared snippet")
        _write(blog_dir, ".scratch.md", "hidden")
        assert len(discover_files(blog_dir)) == 3

    def test_non_recursive_by_default(self, blog_dir: Path):
        _write(blog_dir / "series", "part-1.md", _post())
        names = [p.name for p in discover_files(blog_dir)]
        assert "part-1.md" not in names

    def test_recursive(self, blog_dir: Path):
        _write(blog_dir / "series", "part-1.md", _post())
        _write(blog_dir / ".drafts", "secret.md", _post())
        paths = discover_files(blog_dir, recursive=True)
        rel = [p.relative_to(blog_dir).as_posix() for p in paths]
        assert "series/part-1.md" in rel
        assert all(not r.startswith(".drafts") for r in rel)

    def test_custom_extensions(self, blog_dir: Path):
        names = [p.name for p in discover_files(blog_dir, extensions=["mdx"])]
        assert names == ["go-pools.mdx"]

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(ContentDirectoryNotFound):
            discover_files(tmp_path / "nope")


class TestEntryId:
    def test_stem(self, tmp_path: Path):
        assert entry_id_for(tmp_path / "redis-streams.md", tmp_path) == "redis-streams"

    def test_nested_uses_posix_path(self, tmp_path: Path):
        assert entry_id_for(tmp_path / "go" / "channels.mdx", tmp_path) == "go/channels"

    def test_only_last_suffix_removed(self, tmp_path: Path):
        assert entry_id_for(tmp_path / "v1.2-release.md", tmp_path) == "v1.2-release"


class TestLoadEntry:
    def test_valid_file(self, blog_dir: Path):
        entry = load_entry(blog_dir / "docker-layers.md", blog_dir)
        assert entry.id == "docker-layers"
        assert entry.title == "Caching Docker layers"
        assert entry.pub_date == date(2024, 2, 14)
        assert entry.tags == ("docker", "ci")
        assert entry.source_path == "docker-layers.md"
        assert entry.body == "Order your COPY instructions from least to most volatile.\n"

    def test_missing_frontmatter(self, tmp_path: Path):
        path = _write(tmp_path, "plain.md", "# No metadata\n")
        with pytest.raises(MissingFrontmatter):
            load_entry(path, tmp_path)

    def test_not_utf8(self, tmp_path: Path):
        path = tmp_path / "latin1.md"
        path.write_bytes("---\ntitle: Caf\xe9\n---\n".encode("latin-1"))
        with pytest.raises(UnreadableFile):
            load_entry(path, tmp_path)


class TestScanDirectory:
    def test_loads_all_valid(self, blog_dir: Path):
        result = scan_directory(blog_dir)
        assert result.ok
        assert result.collection.ids == ("docker-layers", "go-pools", "wip")

    def test_id_equals_filename_stem(self, blog_dir: Path):
        result = scan_directory(blog_dir)
        stems = sorted(p.stem for p in blog_dir.iterdir())
        assert list(result.collection.ids) == stems

    def test_bad_file_does_not_abort(self, blog_dir: Path):
        _write(blog_dir, "broken.md", "no frontmatter at all\n")
        result = scan_directory(blog_dir)
        assert len(result.collection) == 3
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.id == "broken"
        assert failure.path == "broken.md"
        assert isinstance(failure.error, MissingFrontmatter)

    def test_missing_pub_date(self, blog_dir: Path):
        _write(
            blog_dir,
            "undated.md",
            "---\ntitle: Undated\ndescription: No date.\n---\nBody\n",
        )
        result = scan_directory(blog_dir)
        assert "undated" not in result.collection
        assert result.failures[0].error == MissingRequiredField("pubDate")

    def test_bare_string_tags(self, blog_dir: Path):
        _write(blog_dir, "golang.md", _post(tags='"golang"'))
        result = scan_directory(blog_dir)
        assert result.failures[0].error == TypeMismatch("tags")

    def test_impossible_date_is_per_file_failure(self, blog_dir: Path):
        _write(blog_dir, "leap.md", _post(pub_date="2024-02-30"))
        result = scan_directory(blog_dir)
        assert result.collection.ids == ("docker-layers", "go-pools", "wip")
        assert [f.id for f in result.failures] == ["leap"]
        assert result.failures[0].error == TypeMismatch("pubDate")

    def test_impossible_month_sequential(self, blog_dir: Path):
        _write(blog_dir, "month.md", _post(pub_date="2024-13-01"))
        result = scan_directory(blog_dir, max_workers=1)
        assert len(result.collection) == 3
        assert result.failures[0].error == TypeMismatch("pubDate")

    def test_malformed_yaml(self, blog_dir: Path):
        _write(blog_dir, "oops.md", "---\ntitle: [unclosed\n---\nBody\n")
        result = scan_directory(blog_dir)
        assert isinstance(result.failures[0].error, MalformedFrontmatter)

    def test_duplicate_ids_reject_both(self, blog_dir: Path):
        _write(blog_dir, "a.md", _post(title="Markdown version"))
        _write(blog_dir, "a.mdx", _post(title="MDX version"))
        result = scan_directory(blog_dir)
        assert "a" not in result.collection
        assert [f.path for f in result.duplicates] == ["a.md", "a.mdx"]
        assert all(f.error == DuplicateId("a") for f in result.duplicates)

    def test_duplicate_ids_rejected_even_if_one_is_invalid(self, blog_dir: Path):
        _write(blog_dir, "a.md", "not a post")
        _write(blog_dir, "a.mdx", _post())
        result = scan_directory(blog_dir)
        assert len(result.duplicates) == 2

    def test_duplicate_ids_logged_as_error(self, blog_dir: Path, caplog):
        _write(blog_dir, "a.md", _post())
        _write(blog_dir, "a.mdx", _post())
        with caplog.at_level(logging.ERROR, logger="postshelf.content.loader"):
            scan_directory(blog_dir)
        assert any("Duplicate id" in r.getMessage() for r in caplog.records)

    def test_failures_sorted_by_path(self, blog_dir: Path):
        _write(blog_dir, "z-bad.md", "nothing")
        _write(blog_dir, "b-bad.md", "nothing")
        result = scan_directory(blog_dir)
        assert [f.path for f in result.failures] == ["b-bad.md", "z-bad.md"]

    def test_idempotent(self, blog_dir: Path):
        first = scan_directory(blog_dir)
        second = scan_directory(blog_dir)
        assert first.collection == second.collection
        for a, b in zip(first.collection, second.collection):
            assert a.model_dump() == b.model_dump()

    def test_sequential_matches_parallel(self, blog_dir: Path):
        for i in range(10):
            _write(blog_dir, f"post-{i}.md", _post(title=f"Post {i}"))
        assert (
            scan_directory(blog_dir, max_workers=1).collection
            == scan_directory(blog_dir, max_workers=4).collection
        )

    def test_recursive_ids(self, blog_dir: Path):
        _write(blog_dir / "go", "channels.md", _post())
        result = scan_directory(blog_dir, recursive=True)
        assert "go/channels" in result.collection

    def test_nested_same_stem_is_not_duplicate(self, blog_dir: Path):
        _write(blog_dir / "archive", "docker-layers.md", _post())
        result = scan_directory(blog_dir, recursive=True)
        assert result.ok
        assert "archive/docker-layers" in result.collection

    def test_empty_directory(self, tmp_path: Path):
        result = scan_directory(tmp_path)
        assert result.ok
        assert len(result.collection) == 0

    def test_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(ContentDirectoryNotFound):
            scan_directory(tmp_path / "missing")


class TestLoadCollection:
    def test_strict_success(self, blog_dir: Path):
        collection = load_collection(blog_dir)
        assert len(collection) == 3

    def test_strict_aborts_with_full_list(self, blog_dir: Path):
        _write(blog_dir, "undated.md", "---\ntitle: U\ndescription: D\n---\n")
        _write(blog_dir, "plain.md", "just text")
        with pytest.raises(CollectionLoadError) as exc_info:
            load_collection(blog_dir, strict=True)
        ids = [f.id for f in exc_info.value.failures]
        assert ids == ["plain", "undated"]
        assert "MissingRequiredField" in str(exc_info.value)
        assert "MissingFrontmatter" in str(exc_info.value)

    def test_permissive_excludes_and_logs(self, blog_dir: Path, caplog):
        _write(blog_dir, "undated.md", "---\ntitle: U\ndescription: D\n---\n")
        with caplog.at_level(logging.WARNING, logger="postshelf.content.loader"):
            collection = load_collection(blog_dir, strict=False)
        assert "undated" not in collection
        assert len(collection) == 3
        assert any("undated.md" in r.getMessage() for r in caplog.records)

    def test_permissive_keeps_drafts_in_collection(self, blog_dir: Path):
        collection = load_collection(blog_dir, strict=False)
        assert "wip" in collection
        assert "wip" not in [e.id for e in collection.list_published()]
