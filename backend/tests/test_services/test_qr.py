"""Tests for QR code generation."""

import base64
from unittest.mock import patch

from app.services.qr import build_join_url, generate_project_qr


def test_join_url_uses_frontend_base():
    assert build_join_url("ABCD1234") == "https://app.example.com/invite/ABCD1234"


def test_generates_png_data_url():
    url = generate_project_qr("ABCD1234")
    assert url.startswith("data:image/png;base64,")
    png = base64.b64decode(url.split(",", 1)[1])
    assert png[:8] == b"\x89PNG\r\n\x1a\n"


def test_failure_is_not_fatal():
    with patch("app.services.qr.qrcode.make", side_effect=ValueError("data too long")):
        assert generate_project_qr("ABCD1234") is None
