"""Slacker reminder: countdowns to weekends and public holidays."""

from __future__ import annotations

from datetime import datetime, timedelta

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")

GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"


class Holiday:
    """A holiday starting on a date and lasting a number of days."""

    def __init__(self, name, days, year, month, day):
        self.name = name
        self.date = datetime(year, month, day)
        self.duration = timedelta(days=days)

    def describe(self, now=None) -> str:
        """Countdown or status text relative to ``now``."""
        now = datetime.now() if now is None else now
        remaining = self.date - now
        if remaining >= timedelta(0):
            days = remaining.total_seconds() / 86400
            return f"距离{self.name}还有: {days:.2f}天！"
        if remaining + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"

    def __str__(self) -> str:
        return self.describe()


def parse_holiday(name, record) -> Holiday:
    """Read a ``days_year_month_day`` record."""
    parts = record.strip().split("_")
    if len(parts) != 4:
        raise ValueError(f"invalid holiday record {record!r}")
    days, year, month, day = (int(part) for part in parts)
    return Holiday(name, days, year, month, day)


def format_holiday(days, year, month, day) -> str:
    """Write a holiday as a ``days_year_month_day`` record."""
    return f"{days}_{year}_{month}_{day}"


def weekend_message(today=None) -> str:
    today = datetime.now() if today is None else today
    weekday = today.isoweekday() % 7
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def build_reminder(now, holidays) -> str:
    """The full daily reminder text."""
    parts = [now.strftime("%Y-%m-%d"), GREETING, weekend_message(now)]
    parts.extend("\n" + holiday.describe(now) for holiday in holidays)
    parts.append("\n" + CLOSING)
    return "".join(parts)