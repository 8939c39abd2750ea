from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import UnsafePathError

__all__ = [
    "TRAVERSAL_MARKER",
    "ResolvedAssetPath",
    "validate_asset_path",
]

TRAVERSAL_MARKER = ".."


@dataclass(frozen=True)
class ResolvedAssetPath:
    """An asset location under the asset root.

    Only `validate_asset_path` should construct these.
    """

    path: Path

    def __str__(self) -> str:
        return str(self.path)


def validate_asset_path(raw_path: str, asset_root: str | Path) -> ResolvedAssetPath:
    """Check an untrusted request path and join it onto the asset root.

    Rules:
    - Reject if `..` occurs anywhere in the string (plain substring match).
    - Drop leading "/" so the tail can never replace the root when joined.
    - Reject an empty tail.
    - No canonicalization: symlinks and percent-encoded or unicode variants
      are not inspected, so acceptance is not a full confinement guarantee.

    Raises:
        UnsafePathError: if the path is rejected.
    """
    if TRAVERSAL_MARKER in raw_path:
        raise UnsafePathError("path contains a traversal sequence")

    tail = raw_path.lstrip("/")
    if not tail:
        raise UnsafePathError("path is empty")

    return ResolvedAssetPath(path=Path(asset_root) / tail)
