"""Request building and response reading for two small text web services."""

from __future__ import annotations

import json
from urllib.parse import quote

BEAST_ENCODE_URL = "http://ovooa.com/API/sho_u/?msg="
BEAST_DECODE_URL = "http://ovooa.com/API/sho_u/?format=1&msg="

JUEJUEZI_URL = "https://www.offjuan.com/api/juejuezi/text"
JUEJUEZI_HEADERS = {
    "Referer": "https://juejuezi.offjuan.com/",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
    ),
}
KEYWORD = "绝绝子"


def beast_url(text, decode=False) -> str:
    """URL that encodes text into beast speak, or decodes it back."""
    base = BEAST_DECODE_URL if decode else BEAST_ENCODE_URL
    return base + quote(text, safe="")


def _load(payload):
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    return json.loads(payload)


def beast_message(payload) -> str:
    """The ``data.message`` field of a response, matched case-insensitively."""
    data = _load(payload).get("data")
    if not isinstance(data, dict):
        return ""
    for key, value in data.items():
        if key.lower() == "message" and isinstance(value, str):
            return value
    return ""


def juejuezi_body(verb, noun) -> str:
    """JSON request body for the generator."""
    return json.dumps({"verb": verb, "noun": noun}, ensure_ascii=False, separators=(",", ":"))


def juejuezi_text(payload) -> str:
    """The generated text of a response, or an empty string."""
    value = _load(payload).get("text")
    return value if isinstance(value, str) else ""


def juejuezi_words(text):
    """Split a message into verb and noun.

    Returns the pair when two characters remain once the keyword is removed,
    and None when longer text needs word segmentation first.
    """
    remaining = text.replace(KEYWORD, "")
    if len(remaining) < 2:
        raise ValueError("不要只输入绝绝子")
    if len(remaining) == 2:
        return remaining[0], remaining[1]
    return None