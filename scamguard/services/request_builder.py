from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from google.genai import types

from ..models.analysis import InputMode

# ---------------------------------------------------------------------------
# Prompt text
# ---------------------------------------------------------------------------

SYSTEM_INSTRUCTION = """\
You are ScamGuard, a veteran Cybersecurity Analyst and Social Engineer detector. Your goal is to protect vulnerable users.

When given an image, text, or URL:
1. Analyze the content for signs of fraud (e.g., mismatched URLs, urgency, grammar errors, pixelated logos, requests for money/gift cards).
2. For URLs: Use Google Search to investigate if the domain is legitimate, if it's a known phishing site, or if there are reports of scams associated with it. Cross-reference with the real official website of the organization it claims to be.
3. Identify the specific scam technique (e.g., 'Pig Butchering', 'IRS Impersonation', 'Tech Support Fraud', 'Phishing', 'Safe').

Output your response in a strict JSON structure.
Keep your tone empathetic but firm. If the content is safe, reassure the user. Use "Safe" or "No Scam Detected" for scam_type if low risk.\
"""

_TEXT_PROMPT = "Analyze the following message for scams:\n\n{text}"

_LINK_PROMPT = (
    "Investigate this URL for safety and legitimacy: {url}. "
    "Use Google Search to verify if this is the official site of the entity it claims to represent "
    "or if it is a scam/phishing link."
)

_IMAGE_PROMPT = "Analyze this image for any potential scams or fraudulent activity."

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "risk_score": types.Schema(
            type=types.Type.STRING,
            description="Must be 'High', 'Medium', or 'Low'",
        ),
        "scam_type": types.Schema(
            type=types.Type.STRING,
            description="The name of the detected scam or 'Legitimate' if safe",
        ),
        "red_flags": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="List of specific suspicious elements discovered",
        ),
        "advice": types.Schema(
            type=types.Type.STRING,
            description="Clear instructions for the user",
        ),
    },
    required=["risk_score", "scam_type", "red_flags", "advice"],
)

DEFAULT_IMAGE_MIME = "image/jpeg"

# mime -> (offset, magic) pairs that must all match
_IMAGE_SIGNATURES: list[tuple[str, tuple[tuple[int, bytes], ...]]] = [
    ("image/png", ((0, b"\x89PNG\r\n\x1a\n"),)),
    ("image/jpeg", ((0, b"\xff\xd8\xff"),)),
    ("image/gif", ((0, b"GIF87a"),)),
    ("image/gif", ((0, b"GIF89a"),)),
    ("image/webp", ((0, b"RIFF"), (8, b"WEBP"))),
]


# ---------------------------------------------------------------------------
# Image data URIs
# ---------------------------------------------------------------------------

def sniff_image_mime(image_bytes: bytes) -> str:
    """MIME type from the payload's magic bytes, or the legacy JPEG default."""
    for mime, markers in _IMAGE_SIGNATURES:
        if all(image_bytes[offset:offset + len(magic)] == magic for offset, magic in markers):
            return mime
    return DEFAULT_IMAGE_MIME


def split_data_uri(data_uri: str) -> tuple[str | None, str]:
    """Split ``data:<mime>;base64,<payload>`` into (mime, payload).

    The payload is everything after the first comma. The mime is None when the
    header does not declare one.
    """
    header, sep, payload = data_uri.partition(",")
    if not sep:
        raise ValueError("image input is not a data URI")
    mime = header.removeprefix("data:").split(";", 1)[0].strip().lower()
    return (mime or None), payload


def decode_image(data_uri: str) -> tuple[bytes, str]:
    declared, payload = split_data_uri(data_uri)
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("image payload is not valid base64") from exc
    if not image_bytes:
        raise ValueError("image payload is empty")

    if declared and declared.startswith("image/"):
        return image_bytes, declared
    return image_bytes, sniff_image_mime(image_bytes)


def to_data_uri(image_bytes: bytes, mime_type: str | None = None) -> str:
    mime = mime_type or sniff_image_mime(image_bytes)
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode()}"


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

@dataclass
class BuiltRequest:
    contents: list[types.Part]
    config: types.GenerateContentConfig


def build_request(input: str, mode: InputMode) -> BuiltRequest:
    tools: list[types.Tool] | None = None

    if mode is InputMode.IMAGE:
        image_bytes, mime = decode_image(input)
        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime),
            types.Part.from_text(text=_IMAGE_PROMPT),
        ]
    elif mode is InputMode.LINK:
        contents = [types.Part.from_text(text=_LINK_PROMPT.format(url=input.strip()))]
        # Only link mode may consult live web search.
        tools = [types.Tool(google_search=types.GoogleSearch())]
    else:
        contents = [types.Part.from_text(text=_TEXT_PROMPT.format(text=input))]

    config = types.GenerateContentConfig(
        system_instruction=SYSTEM_INSTRUCTION,
        response_mime_type="application/json",
        response_schema=RESPONSE_SCHEMA,
        tools=tools,
    )
    return BuiltRequest(contents=contents, config=config)
