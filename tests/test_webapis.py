import json
from urllib.parse import parse_qs, urlsplit

import pytest

from zeroplug.webapis import (
    BEAST_DECODE_URL,
    BEAST_ENCODE_URL,
    beast_message,
    beast_url,
    juejuezi_body,
    juejuezi_text,
    juejuezi_words,
)


@pytest.mark.parametrize("text", ["你好", "a&b=c", "嗷呜 嗷"])
def test_beast_url_round_trip(text):
    for decode in (False, True):
        query = parse_qs(urlsplit(beast_url(text, decode)).query)
        assert query["msg"] == [text]


def test_beast_url_bases():
    assert beast_url("x").startswith(BEAST_ENCODE_URL)
    assert beast_url("x", decode=True).startswith(BEAST_DECODE_URL)
    assert "format" in parse_qs(urlsplit(beast_url("x", True)).query)


def test_beast_message():
    assert beast_message('{"data":{"message":"嗷呜"}}') == "嗷呜"
    assert beast_message(b'{"data":{"Message":"abc"}}') == "abc"
    assert beast_message('{"code":1}') == ""
    with pytest.raises(ValueError):
        beast_message("not json")


def test_juejuezi_body_round_trip():
    body = juejuezi_body("喝", '奶"茶')
    assert json.loads(body) == {"verb": "喝", "noun": '奶"茶'}


def test_juejuezi_text():
    assert juejuezi_text('{"text":"生成"}') == "生成"
    assert juejuezi_text(b"{}") == ""


def test_juejuezi_words():
    assert juejuezi_words("吃饭绝绝子") == ("吃", "饭")
    assert juejuezi_words("喝奶茶绝绝子") is None
    for text in ("绝绝子", "吃绝绝子"):
        with pytest.raises(ValueError):
            juejuezi_words(text)