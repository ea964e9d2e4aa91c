"""postshelf - load and validate a directory of blog posts into a queryable collection."""

from postshelf.content import (
    Collection,
    ContentEntry,
    LoadFailure,
    LoadResult,
    PostMetadata,
    load_collection,
    scan_directory,
)
from postshelf.errors import (
    CollectionLoadError,
    ContentDirectoryNotFound,
    ContentError,
    DuplicateId,
    MalformedFrontmatter,
    MissingFrontmatter,
    MissingRequiredField,
    TypeMismatch,
    UnreadableFile,
)

__version__ = "0.1.0"

__all__ = [
    "Collection",
    "CollectionLoadError",
    "ContentDirectoryNotFound",
    "ContentEntry",
    "ContentError",
    "DuplicateId",
    "LoadFailure",
    "LoadResult",
    "MalformedFrontmatter",
    "MissingFrontmatter",
    "MissingRequiredField",
    "PostMetadata",
    "TypeMismatch",
    "UnreadableFile",
    "__version__",
    "load_collection",
    "scan_directory",
]
