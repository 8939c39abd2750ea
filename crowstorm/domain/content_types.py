from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

__all__ = [
    "FALLBACK_CONTENT_TYPE",
    "DEFAULT_CONTENT_TYPES",
    "ExtensionTable",
    "default_extension_table",
    "resolve_content_type",
]

FALLBACK_CONTENT_TYPE = "application/unknown"

# Keys are extensions without the leading dot; lookups are case-sensitive.
DEFAULT_CONTENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "html": "text/html",
        "js": "text/javascript",
        "css": "text/css",
        "json": "application/json",
        "txt": "text/plain",
        "csv": "text/csv",
        "png": "image/png",
        "svg": "image/svg+xml",
        "ico": "image/x-icon",
    }
)


@dataclass(frozen=True)
class ExtensionTable:
    """Read-only extension -> MIME type table with a fallback entry.

    Safe to share between request threads once constructed.
    """

    types: Mapping[str, str] = field(default_factory=lambda: DEFAULT_CONTENT_TYPES)
    fallback: str = FALLBACK_CONTENT_TYPE

    def __post_init__(self) -> None:
        normalized = {ext.lstrip("."): mime for ext, mime in self.types.items()}
        object.__setattr__(self, "types", MappingProxyType(normalized))

    def resolve(self, path: str) -> str:
        """Return the MIME type for the text after the last '.' in `path`.

        No dot, or an extension missing from the table, yields the fallback.
        `archive.tar.gz` resolves on `gz` only.
        """
        _, dot, ext = str(path).rpartition(".")
        if not dot:
            return self.fallback
        return self.types.get(ext, self.fallback)


_DEFAULT_TABLE = ExtensionTable()


def default_extension_table() -> ExtensionTable:
    return _DEFAULT_TABLE


def resolve_content_type(path: str, table: ExtensionTable | None = None) -> str:
    """Resolve `path` against `table`, or the default table if omitted."""
    return (table or _DEFAULT_TABLE).resolve(path)
