import pytest

from zeroplug.managerstore import (
    ManagerStore,
    check_new_user,
    gist_url,
    parse_join_answer,
    render_welcome,
)


@pytest.fixture
def store(tmp_path):
    db = ManagerStore(tmp_path / "config.db")
    yield db
    db.close()


def test_welcome_round_trip_and_replace(store):
    assert store.welcome(1) is None
    store.set_welcome(1, "hi {at}")
    assert store.welcome(1) == "hi {at}"
    store.set_welcome(1, "bye")
    assert store.welcome(1) == "bye"


def test_farewell_separate_from_welcome(store):
    store.set_welcome(5, "hello")
    assert store.farewell(5) is None
    store.set_farewell(5, "see you")
    assert store.farewell(5) == "see you"
    assert store.welcome(5) == "hello"


def test_members(store):
    assert not store.has_member("alice")
    store.add_member(10, "alice")
    assert store.has_member("alice")


def test_persistence(tmp_path):
    path = tmp_path / "x.db"
    first = ManagerStore(path)
    first.set_welcome(2, "persisted")
    first.close()
    second = ManagerStore(path)
    assert second.welcome(2) == "persisted"
    second.close()


def test_render_welcome():
    text = render_welcome("{at}{nickname}|{uid}|{gid}|{groupname}", 42, "Bob", 7, "Group")
    assert text == "[CQ:at,qq=42]Bob|42|7|Group"


def test_render_avatar():
    text = render_welcome("{avatar}", 42, "n", 1, "g")
    assert text == "[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk=42&s=640]"


def test_parse_join_answer():
    assert parse_join_answer("问题：x\n答案：user/abc") == ("user", "abc")


@pytest.mark.parametrize("comment", ["答案：/abc", "答案：nohash", "no marker"])
def test_parse_join_answer_errors(comment):
    with pytest.raises(ValueError):
        parse_join_answer(comment)


def test_gist_url():
    assert gist_url("u", "h", 123) == (
        "https://gist.githubusercontent.com/u/h/raw/202cb962ac59075b964b07152d234b70"
    )


def test_check_new_user_ok(store):
    urls = []

    def fetch(url):
        urls.append(url)
        return b"1000"

    assert check_new_user(store, 9, 123, "u", "h", fetch, now=1100) == (True, "")
    assert urls == [gist_url("u", "h", 123)]
    assert store.has_member("u")


def test_check_new_user_timeout(store):
    ok, reason = check_new_user(store, 9, 1, "u", "h", lambda url: "1000", now=1600)
    assert (ok, reason) == (False, "时间戳超时")
    assert not store.has_member("u")


def test_check_new_user_bad_format(store):
    ok, reason = check_new_user(store, 9, 1, "u", "h", lambda url: "abc", now=0)
    assert not ok
    assert reason == "时间戳格式错误: abc"


def test_check_new_user_fetch_error(store):
    def fetch(url):
        raise OSError("down")

    ok, reason = check_new_user(store, 9, 1, "u", "h", fetch, now=0)
    assert not ok
    assert reason == "无法连接到gist: down"


def test_check_new_user_existing(store):
    store.add_member(1, "u")
    ok, reason = check_new_user(store, 9, 1, "u", "h", lambda url: "0", now=0)
    assert (ok, reason) == (False, "该github用户已入群")