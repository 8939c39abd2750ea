from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..domain.content_types import ExtensionTable
from ..domain.paths import ResolvedAssetPath, validate_asset_path
from ..errors import AssetNotFoundError
from ..logging_conf import get_logger

__all__ = ["INDEX_FILE", "Asset", "read_asset", "serve_index", "serve_path"]

logger = get_logger("service.assets")

INDEX_FILE = "index.html"


@dataclass(frozen=True)
class Asset:
    """A static file loaded for one response."""

    path: Path
    body: bytes
    content_type: str


def read_asset(resolved: ResolvedAssetPath) -> bytes:
    """Load the whole file into memory.

    Files are buffered fully per request; there is no streaming or caching,
    which is fine for a small asset set.

    Raises:
        AssetNotFoundError: if the path is not an existing regular file.
    """
    # is_file() still raises for ENAMETOOLONG or EACCES on a parent directory.
    try:
        if not resolved.path.is_file():
            raise AssetNotFoundError(f"no asset at {resolved.path}")
        return resolved.path.read_bytes()
    except OSError as e:
        raise AssetNotFoundError(f"no asset at {resolved.path}: {e.strerror}") from e


# ------------------------
# Use-cases
# ------------------------

def serve_index(*, asset_root: Path, content_types: ExtensionTable) -> Asset:
    """Load the root `index.html`."""
    return serve_path(INDEX_FILE, asset_root=asset_root, content_types=content_types)


def serve_path(raw_path: str, *, asset_root: Path, content_types: ExtensionTable) -> Asset:
    """Validate, load and type one requested asset.

    Raises:
        UnsafePathError: if the path fails the traversal guard.
        AssetNotFoundError: if nothing servable exists there.
    """
    resolved = validate_asset_path(raw_path, asset_root)
    body = read_asset(resolved)
    content_type = content_types.resolve(str(resolved))
    logger.debug(
        "asset.read",
        extra={"event": "asset_read", "path": str(resolved), "bytes": len(body)},
    )
    return Asset(path=resolved.path, body=body, content_type=content_type)
