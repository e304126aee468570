import fitz  # PyMuPDF
import pytest

from annotation_export.fonts import load_font_asset
from tests.helpers import TEST_FONT_NAME, make_pdf


@pytest.fixture(scope="session")
def font_path(tmp_path_factory):
    """PyMuPDF's bundled CJK font written to disk."""
    path = tmp_path_factory.mktemp("fonts") / "test-cjk.ttf"
    path.write_bytes(fitz.Font("cjk").buffer)
    return str(path)


@pytest.fixture(scope="session")
def font_asset(font_path):
    return load_font_asset(font_path, TEST_FONT_NAME)


@pytest.fixture
def source_pdf():
    return make_pdf(pages=2)
