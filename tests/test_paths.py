from __future__ import annotations

from pathlib import Path

import pytest

from crowstorm.domain.paths import ResolvedAssetPath, validate_asset_path
from crowstorm.errors import UnsafePathError

ROOT = Path("/srv/public")


@pytest.mark.parametrize(
    "raw",
    ["../etc/passwd", "a/../../b", "..", "foo..bar", "css/..", "....//etc"],
)
def test_rejects_any_double_dot(raw):
    with pytest.raises(UnsafePathError):
        validate_asset_path(raw, ROOT)


def test_accepts_plain_and_nested_paths():
    assert validate_asset_path("app.js", ROOT) == ResolvedAssetPath(ROOT / "app.js")
    assert validate_asset_path("css/site.css", ROOT).path == ROOT / "css" / "site.css"


def test_absolute_tail_stays_under_root():
    resolved = validate_asset_path("/etc/passwd", ROOT)
    assert resolved.path == ROOT / "etc" / "passwd"


@pytest.mark.parametrize("raw", ["", "/", "///"])
def test_rejects_empty_tail(raw):
    with pytest.raises(UnsafePathError):
        validate_asset_path(raw, ROOT)


def test_percent_encoded_traversal_is_not_decoded():
    # The guard is a plain substring check; decoding happens in the HTTP layer.
    resolved = validate_asset_path("%2e%2e/secret", ROOT)
    assert resolved.path == ROOT / "%2e%2e" / "secret"


def test_unsafe_path_error_code():
    with pytest.raises(UnsafePathError) as info:
        validate_asset_path("../x", ROOT)
    assert info.value.code == "unsafe_path"
