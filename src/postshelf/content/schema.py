"""Strict frontmatter schema for blog posts.

Values are checked, not coerced: a bare string under ``tags`` or a
quoted ``"yes"`` under ``draft`` is an error rather than a guess.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from postshelf.content.frontmatter import parse_metadata_text
from postshelf.content.models import PostMetadata
from postshelf.errors import MissingRequiredField, TypeMismatch

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "pubDate")
KNOWN_FIELDS = frozenset({*REQUIRED_FIELDS, "updatedDate", "tags", "draft"})

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_metadata(raw: str) -> PostMetadata:
    """Parse a raw frontmatter block and validate it."""
    return validate_mapping(parse_metadata_text(raw))


def validate_mapping(data: Mapping[str, Any]) -> PostMetadata:
    """Validate parsed frontmatter and build a PostMetadata.

    Fields are checked in a fixed order and the first problem is raised.

    Raises:
        MissingRequiredField: title, description or pubDate absent or blank.
        TypeMismatch: A value has the wrong type or is not a valid date.
    """
    for name in REQUIRED_FIELDS:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingRequiredField(name)

    title = _require_text(data, "title")
    description = _require_text(data, "description")
    pub_date = _parse_date(data["pubDate"], "pubDate")

    updated_date = None
    if data.get("updatedDate") is not None:
        updated_date = _parse_date(data["updatedDate"], "updatedDate")

    tags = _parse_tags(data.get("tags"))

    draft = data.get("draft")
    if draft is None:
        draft = False
    elif not isinstance(draft, bool):
        raise TypeMismatch("draft", f"expected true or false, got {type(draft).__name__}")

    unknown = sorted(str(k) for k in data if k not in KNOWN_FIELDS)
    if unknown:
        logger.debug("Ignoring unknown frontmatter keys: %s", ", ".join(unknown))

    return PostMetadata(
        title=title,
        description=description,
        pub_date=pub_date,
        updated_date=updated_date,
        tags=tags,
        draft=draft,
    )


def _require_text(data: Mapping[str, Any], name: str) -> str:
    value = data[name]
    if not isinstance(value, str):
        raise TypeMismatch(name, f"expected a string, got {type(value).__name__}")
    return value.strip()


def _parse_date(value: object, name: str) -> date:
    """Accept a YAML date or a quoted ``YYYY-MM-DD`` string, nothing else."""
    # datetime subclasses date, so it has to be rejected first
    if isinstance(value, datetime):
        raise TypeMismatch(name, "expected a date without a time of day")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        if not _ISO_DATE_RE.match(value.strip()):
            raise TypeMismatch(name, f"not a valid ISO-8601 date: {value!r}")
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise TypeMismatch(name, f"not a valid ISO-8601 date: {value!r}") from exc
    raise TypeMismatch(name, f"expected an ISO-8601 date, got {type(value).__name__}")


def _parse_tags(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        raise TypeMismatch("tags", "expected a list of strings, got a bare string")
    if not isinstance(value, list):
        raise TypeMismatch("tags", f"expected a list of strings, got {type(value).__name__}")

    tags: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise TypeMismatch("tags", f"tag {item!r} is not a string")
        tag = item.strip().lower()
        if not tag:
            raise TypeMismatch("tags", "empty tag")
        tags.append(tag)

    if len(set(tags)) != len(tags):
        logger.warning("Duplicate tags in frontmatter: %s", ", ".join(tags))
    return tuple(tags)
