from datetime import datetime

import pytest

from zeroplug.clock import Clock, CronSchedule
from zeroplug.timer import get_filled_cron_timer, get_filled_timer


@pytest.fixture
def sent():
    return []


@pytest.fixture
def clock(tmp_path, sent):
    c = Clock(tmp_path / "test.db", sent.append)
    yield c
    c.close()


def test_source_clock_case(tmp_path, sent):
    path = tmp_path / "test.db"
    first = Clock(path, sent.append)
    first.add_timer_to_db(
        get_filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    )
    assert first.list_timers(0) == []
    first.close()
    reopened = Clock(path, sent.append)
    try:
        assert reopened.list_timers(0) == ["12月1周12:0\n"]
    finally:
        reopened.close()


def test_register_and_cancel_cron(clock):
    timer = get_filled_cron_timer("0 8 * * *", "早", "", 1, 42)
    assert clock.register_timer(timer, True)
    key = timer.timer_id()
    assert timer.id == key
    assert clock.get_timer(key) is timer
    assert clock.list_timers(42) == ["0 8 * * *\n"]
    assert clock.list_timers(43) == []
    assert clock.cancel_timer(key)
    assert clock.get_timer(key) is None
    assert not clock.cancel_timer(key)


def test_invalid_cron_is_rejected(clock):
    timer = get_filled_cron_timer("61 * * * *", "x", "", 1, 42)
    assert not clock.register_timer(timer, True)
    assert "61" in timer.alert
    assert clock.get_timer(timer.id) is None


def test_cron_timer_persists(tmp_path, sent):
    path = tmp_path / "t.db"
    first = Clock(path, sent.append)
    timer = get_filled_cron_timer("30 9 * * 1", "周一", "", 1, 7)
    first.register_timer(timer, True)
    key = timer.id
    first.close()
    second = Clock(path, sent.append)
    try:
        loaded = second.get_timer(key)
        assert loaded.cron == "30 9 * * 1"
        assert loaded.alert == "周一"
    finally:
        second.close()


def test_list_every_week(clock):
    timer = get_filled_timer(["", "每", "每周", "8", "30", "", "hi"], 1, 5, False)
    assert clock.register_timer(timer, True)
    assert clock.list_timers(5) == ["每月每周8:30\n"]
    assert clock.cancel_timer(timer.id)
    assert not timer.enabled()


def test_cron_matches():
    schedule = CronSchedule("0 8 * * *")
    assert schedule.matches(datetime(2023, 1, 2, 8, 0))
    assert not schedule.matches(datetime(2023, 1, 2, 8, 1))


def test_cron_next_after():
    assert CronSchedule("0 8 * * *").next_after(datetime(2023, 1, 2, 8, 0)) == datetime(
        2023, 1, 3, 8, 0
    )
    assert CronSchedule("*/15 * * * *").next_after(
        datetime(2023, 1, 2, 10, 7)
    ) == datetime(2023, 1, 2, 10, 15)
    assert CronSchedule("0 0 1 JAN *").next_after(datetime(2023, 3, 1)) == datetime(
        2024, 1, 1
    )


def test_cron_day_or_weekday():
    schedule = CronSchedule("0 0 15 * 1")
    assert schedule.matches(datetime(2023, 1, 16))
    assert schedule.matches(datetime(2023, 1, 15))
    assert not schedule.matches(datetime(2023, 1, 17))


def test_cron_descriptor_equals_fields():
    moment = datetime(2023, 5, 6, 7, 8)
    assert CronSchedule("@daily").next_after(moment) == CronSchedule(
        "0 0 * * *"
    ).next_after(moment)


@pytest.mark.parametrize("expr", ["* * *", "61 * * * *", "* * * * 8", "@never", "5-1 * * * *"])
def test_cron_invalid(expr):
    with pytest.raises(ValueError):
        CronSchedule(expr)