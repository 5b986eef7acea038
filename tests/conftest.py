"""Pytest configuration and fixtures."""

import io
import json

import pytest
import requests
from PIL import Image

from mtg_card_designer.config import get_settings
from mtg_card_designer.domain import DEFAULT_CARD_DATA, CardData, CardType, Template
from mtg_card_designer.domain.defaults import MODERN_TEMPLATE
from mtg_card_designer.rendering.images import to_data_uri


def png_bytes(size=(20, 20), color=(255, 0, 0, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, "PNG")
    return buffer.getvalue()


def png_data_uri(size=(20, 20), color=(255, 0, 0, 255)) -> str:
    return to_data_uri(png_bytes(size, color), "image/png")


def make_response(status_code: int = 200, body=None) -> requests.Response:
    """Build a real ``requests.Response`` with a JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    response.url = "http://test.local/api"
    return response


@pytest.fixture
def image_uri():
    """Provide a factory for solid-color PNG data URIs."""
    return png_data_uri


@pytest.fixture
def image_bytes():
    """Provide a factory for solid-color PNG bytes."""
    return png_bytes


@pytest.fixture
def json_response():
    """Provide a factory for fake HTTP responses."""
    return make_response


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point every configured directory at a temporary location."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setenv("FONTS_DIR", str(tmp_path / "fonts"))
    monkeypatch.delenv("ACCESS_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def template() -> Template:
    """Provide the built-in modern template."""
    return MODERN_TEMPLATE


@pytest.fixture
def editable_template() -> Template:
    """Provide an unsaved template any user may edit."""
    return MODERN_TEMPLATE.copy_as_new("new-test")


@pytest.fixture
def framed_template() -> Template:
    """Provide a template with an opaque frame and a gradient."""
    return MODERN_TEMPLATE.model_copy(
        update={
            "frame_image": png_data_uri(color=(0, 0, 0, 255)),
            "gradient_start_color": "#ffffff",
            "gradient_end_color": "#ffffff",
            "gradient_opacity": 1.0,
        }
    )


@pytest.fixture
def creature() -> CardData:
    """Provide a sample creature card."""
    return DEFAULT_CARD_DATA


@pytest.fixture
def instant() -> CardData:
    """Provide a sample instant card."""
    return CardData(
        name="Counterspell",
        mana_cost="{U}{U}",
        card_type=CardType.INSTANT,
        rules_text="Counter target spell.",
        rarity="Common",
        template_id="modern",
    )
