"""Group reminder timers with a bit-packed month/day/week/hour/minute schedule."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date as _date
from datetime import datetime, timedelta

_ALL_BITS = 0xFFFFFF
_EN_BIT = 0x800000
_MONTH = (19, 0x780000)
_DAY = (14, 0x07C000)
_WEEK = (11, 0x003800)
_HOUR = (6, 0x0007C0)
_MINUTE = (0, 0x00003F)

_STABLE_HOUR = 0x8
_STABLE_DAY = 0x4
_STABLE_WEEK = 0x2
_STABLE_MONTH = 0x1

_CHINESE_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"


def _weekday(moment: _date) -> int:
    """Weekday counted from Sunday as 0."""
    return moment.isoweekday() % 7


def _normalized(year, month, day, hour, minute, second, microsecond, tzinfo):
    """Build a datetime, letting out-of-range fields roll over into the next unit."""
    carry, month_index = divmod(month - 1, 12)
    base = datetime(year + carry, month_index + 1, 1, tzinfo=tzinfo)
    return base + timedelta(
        days=day - 1,
        hours=hour,
        minutes=minute,
        seconds=second,
        microseconds=microsecond,
    )


def _add_date(moment: datetime, years: int, months: int, days: int) -> datetime:
    return _normalized(
        moment.year + years,
        moment.month + months,
        moment.day + days,
        moment.hour,
        moment.minute,
        moment.second,
        moment.microsecond,
        moment.tzinfo,
    )


def _at_all() -> dict:
    return {"type": "at", "data": {"qq": "all"}}


@dataclass
class Timer:
    """A reminder; ``emdwhm`` packs enable/month/day/week/hour/minute bits."""

    id: int = 0
    emdwhm: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    def _field(self, shift: int, mask: int) -> int:
        value = (self.emdwhm & mask) >> shift
        return -1 if value == mask >> shift else value

    def _store(self, value: int, shift: int, mask: int) -> None:
        self.emdwhm = ((value << shift) & mask) | (self.emdwhm & (_ALL_BITS ^ mask))

    def enabled(self) -> bool:
        return bool(self.emdwhm & _EN_BIT)

    def _set_enabled(self, flag: bool) -> None:
        if flag:
            self.emdwhm |= _EN_BIT
        else:
            self.emdwhm &= _ALL_BITS ^ _EN_BIT

    def disable(self) -> None:
        """Switch the timer off, keeping its schedule."""
        self._set_enabled(False)

    def month(self) -> int:
        return self._field(*_MONTH)

    def day(self) -> int:
        return self._field(*_DAY)

    def week(self) -> int:
        """Weekday, Sunday being 0; -1 means every week."""
        return self._field(*_WEEK)

    def hour(self) -> int:
        return self._field(*_HOUR)

    def minute(self) -> int:
        return self._field(*_MINUTE)

    def timer_info(self) -> str:
        """Normalized description used as the identity of the timer."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month()}月{self.day()}日{self.week()}周"
            f"{self.hour()}:{self.minute()}"
        )

    def timer_id(self) -> int:
        digest = hashlib.md5(self.timer_info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")

    def next_wake_time(self, now: datetime | None = None) -> datetime:
        """When the timer should next wake up to check whether it fires."""
        now = datetime.now() if now is None else now
        month, day, hour = self.month(), self.day(), self.hour()
        minute, week = self.minute(), self.week()

        unit = timedelta(0)
        if minute >= 0:
            if hour < 0:
                unit = timedelta(hours=1)
            elif day < 0 or week < 0:
                unit = timedelta(days=1)
            elif day == 0 and week >= 0:
                unit = timedelta(days=week - _weekday(now))
                if unit < timedelta(0):
                    unit = timedelta(days=7)
        else:
            unit = timedelta(minutes=1)

        stable = 0
        if minute < 0:
            minute = now.minute
        if hour < 0:
            hour = now.hour
        else:
            stable |= _STABLE_HOUR
        if day < 0:
            day = now.day
        elif day > 0:
            stable |= _STABLE_DAY
        else:
            day = now.day
            if week >= 0:
                stable |= _STABLE_WEEK
        if month < 0:
            month = now.month
        else:
            stable |= _STABLE_MONTH

        if stable == _STABLE_DAY | _STABLE_MONTH:
            if self.day() != now.day or self.month() != now.month:
                hour = 0
        elif stable == _STABLE_HOUR | _STABLE_MONTH:
            if self.month() != now.month:
                day = 0
        elif stable == _STABLE_MONTH:
            if self.month() != now.month:
                day = 0
                hour = 0

        moment = _normalized(
            now.year, month, day, hour, minute, now.second, now.microsecond, now.tzinfo
        )
        if unit > timedelta(0):
            moment += unit

        if moment <= now:
            if self.month() < 0:
                if self.day() > 0 or (self.day() == 0 and self.week() >= 0):
                    moment = _add_date(moment, 0, 1, 0)
                elif self.day() < 0 or self.week() < 0:
                    if self.hour() > 0:
                        moment = _add_date(moment, 0, 0, 1)
                    elif self.minute() > 0:
                        moment += timedelta(hours=1)
            else:
                moment = _add_date(moment, 1, 0, 0)

        if stable & _STABLE_HOUR and moment.hour != hour:
            if not stable & _STABLE_DAY:
                moment = _add_date(moment, 0, 0, 1) - timedelta(hours=1)
            else:
                moment = _add_date(moment, 0, 0, 7) - timedelta(hours=1)
        if stable & _STABLE_DAY and moment.day != day:
            moment = _add_date(moment, 1, 0, -1)
        if stable & _STABLE_WEEK and _weekday(moment) != week:
            moment = first_weekday(_add_date(moment, 1, 0, 0), week)

        if moment <= now:
            moment = now + timedelta(minutes=1)
        return moment

    def should_fire(self, now: datetime | None = None) -> bool:
        """Whether an enabled timer matches the given moment."""
        now = datetime.now() if now is None else now
        if not self.enabled():
            return False
        month, day, week = self.month(), self.day(), self.week()
        if month >= 0 and month != now.month:
            return False
        if day == 0:
            date_ok = week < 0 or week == _weekday(now)
        else:
            date_ok = day < 0 or day == now.day
        if not date_ok:
            return False
        hour, minute = self.hour(), self.minute()
        return (hour < 0 or hour == now.hour) and (minute < 0 or minute == now.minute)

    def message(self) -> list[dict]:
        """Message segments announcing the reminder to the whole group."""
        segments = [_at_all(), {"type": "text", "data": {"text": self.alert}}]
        if self.url:
            segments.append({"type": "image", "data": {"file": self.url, "cache": "0"}})
        return segments


def get_filled_cron_timer(cron, alert, url, bot_id, group_id) -> Timer:
    """A timer driven by a cron expression."""
    return Timer(self_id=bot_id, group_id=group_id, alert=alert, cron=cron, url=url)


def _check_day(day: int, reason: str) -> None:
    if (day != -1 and day <= 0) or day > 31:
        raise ValueError(reason)


def get_filled_timer(date_strs, bot_id, group_id, match_date_only) -> Timer:
    """Build a timer from the matched groups of a Chinese reminder command.

    ``date_strs`` holds the whole match followed by month, day or week, hour,
    minute and, unless ``match_date_only``, the optional image part and the alert.
    Raises ValueError when a field is out of range.
    """
    month_str, day_week, hour_str, minute_str = date_strs[1:5]
    timer = Timer()

    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        raise ValueError("月份非法！")
    timer._store(month, *_MONTH)

    if not day_week:
        raise ValueError("日期非法！")
    if len(day_week) == 4:
        day = chinese_num_to_int(day_week[0] + day_week[2])
        _check_day(day, "日期非法1！")
        timer._store(day, *_DAY)
    elif day_week[-1] == "日":
        day = chinese_num_to_int(day_week[:-1])
        _check_day(day, "日期非法2！")
        timer._store(day, *_DAY)
    elif day_week[0] == _EVERY:
        timer._store(-1, *_WEEK)
    else:
        week = chinese_num_to_int(day_week[1:])
        if week == 7:
            week = 0
        if week < 0 or week > 6:
            raise ValueError("星期非法！")
        timer._store(week, *_WEEK)

    if len(hour_str) == 3:
        hour_str = hour_str[0] + hour_str[2]
    hour = chinese_num_to_int(hour_str)
    if hour < -1 or hour > 23:
        raise ValueError("小时非法！")
    timer._store(hour, *_HOUR)

    if len(minute_str) == 3:
        minute_str = minute_str[0] + minute_str[2]
    minute = chinese_num_to_int(minute_str)
    if minute < -1 or minute > 59:
        raise ValueError("分钟非法！")
    timer._store(minute, *_MINUTE)

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            url = url_str[1:]
            if not url.startswith("http"):
                raise ValueError("url非法！")
            timer.url = url
        timer.alert = date_strs[6]
        timer._set_enabled(True)

    timer.self_id = bot_id
    timer.group_id = group_id
    return timer


def chinese_num_to_int(text: str) -> int:
    """Convert a one or two digit Chinese (or Arabic) number.

    "每" alone means -1 and "每" followed by a digit means that digit negated.
    """
    if not text:
        raise ValueError("empty number")
    first = text[0]
    if first.isdecimal():
        return int(text) if text.isascii() and text.isdecimal() else 0
    if first == _EVERY:
        return -chinese_char_to_int(text[1]) if len(text) == 2 else -1
    if len(text) == 1:
        return chinese_char_to_int(first)
    tens = chinese_char_to_int(first)
    if tens != 10:
        tens *= 10
    ones = chinese_char_to_int(text[1])
    if ones == 10:
        ones = 0
    return tens + ones


def chinese_char_to_int(char: str) -> int:
    """Map a single Chinese digit to 0..10; 日 and 天 (Sunday) map to 7."""
    if char in ("日", "天"):
        return 7
    index = _CHINESE_DIGITS.find(char)
    return index if index >= 0 else 0


def first_weekday(date, weekday: int):
    """The first day in the month of ``date`` falling on ``weekday`` (Sunday is 0)."""
    if not 0 <= weekday <= 6:
        raise ValueError(f"invalid weekday {weekday}")
    moment = date - timedelta(days=date.day - 1)
    while _weekday(moment) != weekday:
        moment += timedelta(days=1)
    return moment