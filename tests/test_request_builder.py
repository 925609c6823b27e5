"""
Tests for mode-specific Gemini request construction.
"""

from __future__ import annotations

import base64

import pytest

from scamguard.models.analysis import InputMode
from scamguard.services.request_builder import (
    SYSTEM_INSTRUCTION,
    build_request,
    decode_image,
    sniff_image_mime,
    split_data_uri,
    to_data_uri,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


def _data_uri(raw: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode()}"


def test_every_request_carries_persona_and_schema():
    for mode, payload in [
        (InputMode.TEXT, "hello"),
        (InputMode.LINK, "https://example.com"),
        (InputMode.IMAGE, _data_uri(PNG_BYTES, "image/png")),
    ]:
        built = build_request(payload, mode)
        assert built.config.system_instruction == SYSTEM_INSTRUCTION
        assert built.config.response_mime_type == "application/json"
        assert built.config.response_schema.required == ["risk_score", "scam_type", "red_flags", "advice"]


def test_text_mode_wraps_message_without_search():
    built = build_request("You won a prize! Send a gift card.", InputMode.TEXT)
    assert len(built.contents) == 1
    assert built.contents[0].text == "Analyze the following message for scams:\n\nYou won a prize! Send a gift card."
    assert not built.config.tools


def test_link_mode_enables_google_search():
    built = build_request("https://paypa1-secure.example", InputMode.LINK)
    assert "https://paypa1-secure.example" in built.contents[0].text
    assert "official site" in built.contents[0].text
    assert len(built.config.tools) == 1
    assert built.config.tools[0].google_search is not None


def test_image_mode_forwards_payload_and_declared_mime():
    built = build_request(_data_uri(PNG_BYTES, "image/png"), InputMode.IMAGE)
    image_part, text_part = built.contents
    assert image_part.inline_data.data == PNG_BYTES
    assert image_part.inline_data.mime_type == "image/png"
    assert "scams" in text_part.text
    assert not built.config.tools


def test_image_mime_is_sniffed_when_header_has_none():
    raw, mime = decode_image("data:;base64," + base64.b64encode(PNG_BYTES).decode())
    assert raw == PNG_BYTES
    assert mime == "image/png"


def test_image_mime_falls_back_to_jpeg():
    _, mime = decode_image(_data_uri(b"not really an image", "application/octet-stream"))
    assert mime == "image/jpeg"


@pytest.mark.parametrize("raw, expected", [
    (b"GIF89a" + b"\x00" * 8, "image/gif"),
    (b"GIF87a" + b"\x00" * 8, "image/gif"),
    (b"RIFF\x10\x00\x00\x00WEBPVP8 ", "image/webp"),
    (b"RIFX\x10\x00\x00\x00WEBPVP8 ", "image/jpeg"),
    (b"\xff\xd8\xff\xe0", "image/jpeg"),
    (b"", "image/jpeg"),
])
def test_sniff_image_mime_signatures(raw, expected):
    assert sniff_image_mime(raw) == expected


def test_split_data_uri_uses_first_comma():
    mime, payload = split_data_uri("data:image/gif;base64,AAA,BBB")
    assert mime == "image/gif"
    assert payload == "AAA,BBB"


@pytest.mark.parametrize("bad", ["no comma here", "data:image/png;base64,@@@not-base64@@@", "data:image/png;base64,"])
def test_bad_image_input_raises_value_error(bad):
    with pytest.raises(ValueError):
        build_request(bad, InputMode.IMAGE)


def test_to_data_uri_round_trips_through_decode():
    raw, mime = decode_image(to_data_uri(JPEG_BYTES))
    assert raw == JPEG_BYTES
    assert mime == "image/jpeg"
