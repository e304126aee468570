"""
Bundled font loading.

The font is read once at startup and shared read-only by every export;
a missing file is a deployment error, not a request error.
"""

import logging
import os
from dataclasses import dataclass

import fitz  # PyMuPDF

from .errors import FontAssetError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontAsset:
    name: str
    path: str
    buffer: bytes


def load_font_asset(font_path: str, font_name: str) -> FontAsset:
    """
    Read and validate the font file.

    Raises:
        FontAssetError: the file is missing or is not a usable font
    """
    if not os.path.isfile(font_path):
        raise FontAssetError(f"Font file not found: {font_path}")

    with open(font_path, "rb") as f:
        buffer = f.read()

    try:
        font = fitz.Font(fontbuffer=buffer)
    except Exception as e:
        raise FontAssetError(f"Font file {font_path} could not be loaded: {e}") from e

    logger.info("[fonts] Loaded font %s (%s, %.1f KB)", font.name, font_path, len(buffer) / 1024)
    return FontAsset(name=font_name, path=font_path, buffer=buffer)
