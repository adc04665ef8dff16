import pytest

from zeroplug.moegoe import moegoe_url, parse_request


def test_parse_japanese():
    assert parse_request("让宁宁说こんにちは") == ("宁宁", "こんにちは")


def test_parse_korean():
    assert parse_request("让Sua说안녕하세요") == ("Sua", "안녕하세요")


def test_parse_chinese_with_punctuation():
    assert parse_request("让派蒙说你好，世界") == ("派蒙", "你好，世界")


@pytest.mark.parametrize(
    "text",
    ["让宁宁说안녕", "让派蒙说hello", "让散兵说你好", "让宁宁说", "宁宁说你好", "让谁说你好"],
)
def test_parse_rejects(text):
    with pytest.raises(ValueError):
        parse_request(text)


def test_japanese_url():
    assert moegoe_url("宁宁", "hello world") == (
        "https://moegoe.azurewebsites.net/api/speak?text=hello+world&id=0"
    )


def test_korean_url():
    url = moegoe_url("Arin", "hi")
    assert url == "https://moegoe.azurewebsites.net/api/speakkr?text=hi&id=2"


def test_chinese_url_and_hidden_speaker_id():
    url = moegoe_url("散兵", "a")
    assert url.startswith("https://genshin.azurewebsites.net/api/speak?format=mp3&text=a&id=")
    assert url.endswith("&id=36")


def test_url_escapes_text():
    url = moegoe_url("派蒙", "你好")
    assert "text=%E4%BD%A0%E5%A5%BD&" in url


def test_unknown_speaker():
    with pytest.raises(KeyError):
        moegoe_url("nobody", "x")


def test_parse_then_url_round_trip():
    speaker, speech = parse_request("让钟离说你好")
    assert moegoe_url(speaker, speech).endswith("&id=15")