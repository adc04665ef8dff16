from datetime import datetime

import pytest

from zeroplug.listening import CATEGORIES, ListeningItem, ListeningStore


@pytest.fixture
def store(tmp_path):
    s = ListeningStore(tmp_path / "item.db")
    s.add(ListeningItem(id=1, title="桜の歌", category="gequ", audio_url="http://a/1.mp3",
                        content="春の歌です", datetime=datetime(2022, 3, 1, 8, 30)))
    s.add(ListeningItem(id=2, title="ニュース", category="tingli", audio_url="http://a/2.mp3",
                        content="今日の天気"))
    s.add(ListeningItem(id=3, title="会話", category="tingli", audio_url="http://a/3.mp3",
                        content="駅で桜を見る"))
    yield s
    s.close()


def test_count(store):
    assert store.count() == 3


def test_random_by_category_stays_in_category(store):
    for _ in range(10):
        assert store.random_by_category(CATEGORIES["听力"]).category == "tingli"


def test_datetime_round_trip(store):
    item = store.random_by_category("gequ")
    assert item.datetime == datetime(2022, 3, 1, 8, 30)
    assert item.title == "桜の歌"


def test_keyword_matches_title_or_content(store):
    assert store.random_by_keyword("tingli", "桜").id == 3
    assert store.random_by_keyword("tingli", "ニュース").id == 2


def test_missing_category_gives_none(store):
    assert store.random_by_category("other") is None
    assert store.random_by_keyword("gequ", "天気") is None


def test_add_replaces_same_id(store):
    store.add(ListeningItem(id=2, title="新しい", category="gequ"))
    assert store.count() == 3
    assert store.random_by_keyword("gequ", "新しい").id == 2