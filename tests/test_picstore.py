import pytest

from zeroplug.picstore import PictureStore, current_page, url_id


@pytest.fixture
def store(tmp_path):
    s = PictureStore(tmp_path / "pics.db")
    yield s
    s.close()


def test_url_id_check_value():
    assert url_id("123456789") == 0xB90956C775A41001


def test_url_id_properties():
    assert url_id("") == 0
    value = url_id("https://example.com/a.jpg")
    assert 0 <= value < 1 << 64
    assert value == url_id("https://example.com/a.jpg")
    assert value != url_id("https://example.com/b.jpg")


def test_current_page():
    assert current_page("[123]") == 123
    with pytest.raises(ValueError):
        current_page("none")


def test_add_and_contains(store):
    url = "https://example.com/a.jpg"
    assert not store.contains(url)
    assert store.add(url) is True
    assert store.contains(url)
    assert store.add(url) is False
    assert store.count() == 1


def test_random_returns_stored(store):
    urls = {f"https://example.com/{i}.jpg" for i in range(20)}
    for url in urls:
        store.add(url)
    assert store.count() == 20
    for _ in range(10):
        assert store.random() in urls


def test_random_empty(store):
    with pytest.raises(LookupError):
        store.random()


def test_persists(tmp_path):
    path = tmp_path / "p.db"
    first = PictureStore(path)
    first.add("https://example.com/x.png")
    first.close()
    second = PictureStore(path)
    assert second.contains("https://example.com/x.png")
    assert second.random() == "https://example.com/x.png"
    second.close()