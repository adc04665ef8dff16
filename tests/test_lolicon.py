import json
from urllib.parse import unquote_plus

import pytest

from zeroplug.lolicon import API, ImageQueue, image_name, lolicon_image_url, tag_url


def _payload(url):
    return json.dumps({"error": "", "data": [{"urls": {"original": url}}]})


def test_image_url_switches_mirror():
    url = lolicon_image_url(_payload("https://i.pixiv.cat/img-original/1_p0.png"))
    assert url == "https://i.pixiv.re/img-original/1_p0.png"


def test_image_url_accepts_bytes():
    data = _payload("https://example.com/a.jpg").encode()
    assert lolicon_image_url(data) == "https://example.com/a.jpg"


def test_error_field_raises():
    with pytest.raises(ValueError, match="bad tag"):
        lolicon_image_url(json.dumps({"error": "bad tag", "data": []}))


def test_empty_data_raises_lookup():
    with pytest.raises(LookupError):
        lolicon_image_url(json.dumps({"error": "", "data": []}))


def test_tag_url_round_trip():
    url = tag_url("萝莉 少女")
    prefix = API + "?tag="
    assert url.startswith(prefix)
    assert " " not in url
    assert unquote_plus(url[len(prefix):]) == "萝莉 少女"


def test_image_name_strips_folder_and_extension():
    assert image_name("https://i.pixiv.re/img/123_p0.jpg") == "123_p0"


def test_refill_count_shrinks_as_queue_fills():
    q = ImageQueue(10)
    assert q.refill_count() == 2
    for n in range(9):
        q.put(f"u{n}")
    assert q.refill_count() == 1
    q.put("last")
    assert q.refill_count() == 0


def test_queue_is_fifo():
    q = ImageQueue(3)
    q.put("first")
    q.put("second")
    assert q.get(timeout=0.1) == "first"
    assert q.get(timeout=0.1) == "second"


def test_get_times_out():
    with pytest.raises(TimeoutError):
        ImageQueue(2).get(timeout=0.01)