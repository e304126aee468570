"""
Tests for loading the bundled font.
"""

import pytest

from annotation_export.errors import FontAssetError
from annotation_export.fonts import load_font_asset


def test_loads_font(font_path):
    asset = load_font_asset(font_path, "Bundled")

    assert asset.name == "Bundled"
    assert asset.path == font_path
    assert len(asset.buffer) > 0


def test_missing_file(tmp_path):
    with pytest.raises(FontAssetError, match="not found"):
        load_font_asset(str(tmp_path / "missing.otf"), "Bundled")


def test_unreadable_font(tmp_path):
    path = tmp_path / "broken.otf"
    path.write_bytes(b"not a font at all")

    with pytest.raises(FontAssetError, match="could not be loaded"):
        load_font_asset(str(path), "Bundled")
