from __future__ import annotations

import pytest

from crowstorm.domain.content_types import default_extension_table
from crowstorm.domain.paths import validate_asset_path
from crowstorm.errors import AssetNotFoundError, UnsafePathError
from crowstorm.service.assets import read_asset, serve_index, serve_path

from conftest import CSS_BODY, INDEX_BODY

TABLE = default_extension_table()


def test_read_asset_returns_exact_bytes(asset_root):
    assert read_asset(validate_asset_path("css/site.css", asset_root)) == CSS_BODY


def test_read_asset_missing_file(asset_root):
    with pytest.raises(AssetNotFoundError):
        read_asset(validate_asset_path("missing.js", asset_root))


def test_read_asset_directory_counts_as_missing(asset_root):
    with pytest.raises(AssetNotFoundError):
        read_asset(validate_asset_path("css", asset_root))


def test_serve_index(asset_root):
    asset = serve_index(asset_root=asset_root, content_types=TABLE)
    assert asset.body == INDEX_BODY
    assert asset.content_type == "text/html"
    assert asset.path == asset_root / "index.html"


def test_serve_index_missing(tmp_path):
    with pytest.raises(AssetNotFoundError):
        serve_index(asset_root=tmp_path, content_types=TABLE)


def test_serve_path_rejects_traversal_before_touching_disk(asset_root):
    with pytest.raises(UnsafePathError):
        serve_path("../public/index.html", asset_root=asset_root, content_types=TABLE)
