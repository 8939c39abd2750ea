from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from crowstorm.errors import ConfigError
from crowstorm.logging_conf import get_logger
from prefetch.types import SourceEntry

__all__ = [
    "DEFAULT_QUERY_URL",
    "COMMENT_PREFIX",
    "build_entry",
    "load_sources",
]

logger = get_logger("prefetch.sources")

DEFAULT_QUERY_URL = (
    "http://www.nasdaq.com/screening/companies-by-name.aspx"
    "?letter=0&exchange={exchange}&render=download"
)
COMMENT_PREFIX = "#"

# Identifiers become file names under the data dir; these would escape it.
_UNSAFE_MARKERS = ("/", "\\", "..")


def build_entry(identifier: str, *, data_dir: Path, url_template: str = DEFAULT_QUERY_URL) -> SourceEntry:
    """Derive the query URL and `<data_dir>/<identifier>.csv` for one identifier."""
    return SourceEntry(
        identifier=identifier,
        remote_url=url_template.format(exchange=quote(identifier, safe="")),
        local_path=Path(data_dir) / f"{identifier}.csv",
    )


def load_sources(
    config_path: str | Path,
    *,
    data_dir: str | Path,
    url_template: str = DEFAULT_QUERY_URL,
) -> dict[str, SourceEntry]:
    """Parse the newline-delimited source list.

    Rules:
    - Surrounding whitespace is stripped from every line.
    - Empty lines and lines starting with '#' are skipped.
    - Identifiers containing '/', '\\' or '..' are skipped with a warning.
    - Entries are keyed by remote URL, so repeated identifiers collapse.

    Raises:
        ConfigError: if the file cannot be opened or decoded.
    """
    entries: dict[str, SourceEntry] = {}
    try:
        with open(config_path, encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                identifier = line.strip()
                if not identifier or identifier.startswith(COMMENT_PREFIX):
                    continue
                if any(marker in identifier for marker in _UNSAFE_MARKERS):
                    logger.warning(
                        "prefetch.skip_identifier",
                        extra={
                            "event": "skip_identifier",
                            "identifier": identifier,
                            "line": lineno,
                        },
                    )
                    continue
                entry = build_entry(identifier, data_dir=Path(data_dir), url_template=url_template)
                entries[entry.remote_url] = entry
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read source list {config_path}: {e}") from e

    logger.info(
        "prefetch.sources_loaded",
        extra={"event": "sources_loaded", "config": str(config_path), "count": len(entries)},
    )
    return entries
