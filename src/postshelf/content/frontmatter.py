"""Split a content file into its YAML frontmatter block and body."""

from __future__ import annotations

import logging
from typing import Any

import yaml

from postshelf.errors import MalformedFrontmatter, MissingFrontmatter

logger = logging.getLogger(__name__)

DELIMITER = "---"
# YAML's document-end marker is accepted as a closing line too.
CLOSING_DELIMITERS = frozenset({"---", "..."})


class _FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps impossible dates such as 2024-02-30 as strings."""


def _construct_timestamp(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> Any:
    try:
        return yaml.SafeLoader.construct_yaml_timestamp(loader, node)
    except ValueError:
        return loader.construct_scalar(node)


_FrontmatterLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


def split_frontmatter(text: str) -> tuple[str, str]:
    """Return ``(raw_metadata_text, body)`` for a content file.

    The file must open with a ``---`` line. The block runs to the next
    ``---`` (or ``...``) line; everything after that line is the body,
    returned verbatim.

    Raises:
        MissingFrontmatter: The first line is not a delimiter.
        MalformedFrontmatter: The block is never closed.
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)

    if not lines or lines[0].rstrip() != DELIMITER:
        raise MissingFrontmatter()

    for index, line in enumerate(lines[1:], 1):
        if line.rstrip() in CLOSING_DELIMITERS:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return raw, body

    raise MalformedFrontmatter("unterminated frontmatter block", line=1, column=1)


def parse_metadata_text(raw: str) -> dict[str, Any]:
    """Load a frontmatter block into a mapping.

    Positions in errors are 1-based and counted from the top of the file,
    so the opening ``---`` is line 1 and the first metadata line is 2.

    Raises:
        MalformedFrontmatter: YAML syntax error, or the block is not a mapping.
    """
    try:
        data = yaml.load(raw, Loader=_FrontmatterLoader)  # noqa: S506
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        problem = exc.problem or exc.context or "invalid YAML"
        if mark is None:
            raise MalformedFrontmatter(problem) from exc
        raise MalformedFrontmatter(problem, line=mark.line + 2, column=mark.column + 1) from exc
    except yaml.YAMLError as exc:
        raise MalformedFrontmatter(str(exc)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontmatter(
            f"frontmatter must be a mapping of keys to values, got {type(data).__name__}",
            line=2,
            column=1,
        )
    return data
