import base64
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from draftink.core.drafts import DraftService, Template, TemplateStore
from draftink.utils.config import StoragePaths

ONE_PIXEL_PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
ONE_PIXEL_PNG = base64.b64decode(ONE_PIXEL_PNG_B64)
ONE_PIXEL_DATA_URL = "data:image/png;base64," + ONE_PIXEL_PNG_B64

TEMPLATE_ID = "tpl-1"


def make_form_pdf(path) -> str:
    """A one-page Letter PDF with a text field 'name' and a checkbox 'agree'."""
    fitz = pytest.importorskip("fitz")

    doc = fitz.open()
    page = doc.new_page(width=612, height=792)

    text_field = fitz.Widget()
    text_field.field_name = "name"
    text_field.field_type = fitz.PDF_WIDGET_TYPE_TEXT
    text_field.rect = fitz.Rect(72, 72, 320, 96)
    text_field.field_value = ""
    page.add_widget(text_field)

    checkbox = fitz.Widget()
    checkbox.field_name = "agree"
    checkbox.field_type = fitz.PDF_WIDGET_TYPE_CHECKBOX
    checkbox.rect = fitz.Rect(72, 120, 90, 138)
    page.add_widget(checkbox)

    doc.save(str(path))
    doc.close()
    return str(path)


@pytest.fixture
def paths(tmp_path):
    return StoragePaths(tmp_path / "storage")


@pytest.fixture
def template_pdf(tmp_path):
    return make_form_pdf(tmp_path / "form.pdf")


@pytest.fixture
def templates(template_pdf):
    return TemplateStore([Template(id=TEMPLATE_ID, stored_path=template_pdf, name="Form")])


@pytest.fixture
def service(paths, templates):
    return DraftService.from_paths(paths, templates)


@pytest.fixture
def png_bytes():
    return ONE_PIXEL_PNG


@pytest.fixture
def png_data_url():
    return ONE_PIXEL_DATA_URL
