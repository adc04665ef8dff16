"""Scheduling and persistence of group reminder timers."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timedelta

from .timer import Timer

_log = logging.getLogger(__name__)

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ["JAN", "FEB", "MAR", "APR", "MAY", "JUN",
         "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"],
        start=1,
    )
}
_DOW_NAMES = {
    name: number
    for number, name in enumerate(["SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"])
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_ANY = ("*", "?")
_SEARCH_SPAN = timedelta(days=5 * 366)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS timer ("
    "id INTEGER PRIMARY KEY NOT NULL, "
    "emdwhm INTEGER NOT NULL, "
    "sid INTEGER NOT NULL, "
    "gid INTEGER NOT NULL, "
    "alert TEXT NOT NULL, "
    "cron TEXT NOT NULL, "
    "url TEXT NOT NULL)"
)


def _parse_value(token: str, names: dict, low: int, high: int) -> int:
    upper = token.upper()
    if upper in names:
        return names[upper]
    if not token.isdigit():
        raise ValueError(f"invalid cron value {token!r}")
    value = int(token)
    if not low <= value <= high:
        raise ValueError(f"cron value {value} out of range [{low}, {high}]")
    return value


def _parse_field(field: str, low: int, high: int, names: dict) -> frozenset:
    values = set()
    for part in field.split(","):
        span, _, step_text = part.partition("/")
        step = 1
        if step_text:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"invalid cron step {step_text!r}")
            step = int(step_text)
        if span in _ANY:
            start, end = low, high
        elif "-" in span:
            first, last = span.split("-", 1)
            start = _parse_value(first, names, low, high)
            end = _parse_value(last, names, low, high)
        else:
            start = _parse_value(span, names, low, high)
            end = high if step_text else start
        if start > end:
            raise ValueError(f"invalid cron range {span!r}")
        values.update(range(start, end + 1, step))
    return frozenset(values)


def _next_month(moment: datetime) -> datetime:
    return datetime(
        moment.year + moment.month // 12, moment.month % 12 + 1, 1, tzinfo=moment.tzinfo
    )


class CronSchedule:
    """A five-field cron expression: minute hour day-of-month month day-of-week."""

    def __init__(self, expr):
        self.expr = expr
        text = expr.strip()
        if text.startswith("@"):
            if text.lower() not in _DESCRIPTORS:
                raise ValueError(f"unrecognized descriptor: {text}")
            text = _DESCRIPTORS[text.lower()]
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {expr}")
        self._minutes = _parse_field(fields[0], 0, 59, {})
        self._hours = _parse_field(fields[1], 0, 23, {})
        self._days = _parse_field(fields[2], 1, 31, {})
        self._months = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        self._weekdays = _parse_field(fields[4], 0, 6, _DOW_NAMES)
        self._dom_any = fields[2].startswith(_ANY)
        self._dow_any = fields[4].startswith(_ANY)

    def _day_matches(self, moment) -> bool:
        dom = moment.day in self._days
        dow = moment.isoweekday() % 7 in self._weekdays
        if self._dom_any or self._dow_any:
            return dom and dow
        return dom or dow

    def matches(self, moment) -> bool:
        """Whether the minute of ``moment`` is one the schedule fires on."""
        return (
            moment.minute in self._minutes
            and moment.hour in self._hours
            and moment.month in self._months
            and self._day_matches(moment)
        )

    def next_after(self, moment):
        """The first matching minute strictly after ``moment``, or None if none is near."""
        current = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        limit = current + _SEARCH_SPAN
        while current <= limit:
            if current.month not in self._months:
                current = _next_month(current)
            elif not self._day_matches(current):
                current = (current + timedelta(days=1)).replace(hour=0, minute=0)
            elif current.hour not in self._hours:
                current = current.replace(minute=0) + timedelta(hours=1)
            elif current.minute not in self._minutes:
                current += timedelta(minutes=1)
            else:
                return current
        return None


class Clock:
    """Keeps timers in SQLite and runs each one on a background thread.

    ``sender`` is called with a timer each time that timer fires.
    """

    def __init__(self, db_path, sender):
        self._sender = sender
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db_lock = threading.Lock()
        self._timers: dict[int, Timer] = {}
        self._stops: dict[int, threading.Event] = {}
        self._lock = threading.RLock()
        with self._db_lock:
            self._db.execute(_SCHEMA)
            self._db.commit()
        for timer in self._load():
            self.register_timer(timer, False)

    def _load(self) -> list[Timer]:
        with self._db_lock:
            rows = self._db.execute(
                "SELECT id, emdwhm, sid, gid, alert, cron, url FROM timer"
            ).fetchall()
        return [
            Timer(id=row[0], emdwhm=row[1], self_id=row[2], group_id=row[3],
                  alert=row[4], cron=row[5], url=row[6])
            for row in rows
        ]

    def register_timer(self, timer, save) -> bool:
        """Store and start ``timer``; False if it cannot run."""
        key = timer.timer_id() if save else timer.id
        if save:
            timer.id = key
        existing = self.get_timer(key)
        if existing is not None and existing is not timer:
            existing.disable()
            self._stop_worker(key)
        _log.info("registering timer %08x", key)
        if timer.cron:
            try:
                schedule = CronSchedule(timer.cron)
            except ValueError as err:
                timer.alert = str(err)
                return False
            if save:
                self.add_timer_to_db(timer)
            self.add_timer_to_map(timer)
            self._start(key, self._run_cron, timer, schedule)
            return True
        if save:
            self.add_timer_to_db(timer)
        self.add_timer_to_map(timer)
        if not timer.enabled():
            return False
        self._start(key, self._run_fixed, timer)
        return True

    def _start(self, key, target, *args) -> None:
        stop = threading.Event()
        with self._lock:
            self._stops[key] = stop
        threading.Thread(target=target, args=(*args, stop), daemon=True).start()

    def _stop_worker(self, key) -> None:
        with self._lock:
            stop = self._stops.pop(key, None)
        if stop is not None:
            stop.set()

    def _fire(self, timer) -> None:
        try:
            self._sender(timer)
        except Exception:
            _log.exception("timer %08x failed to send", timer.id)

    def _run_cron(self, timer, schedule, stop) -> None:
        while not stop.is_set():
            now = datetime.now()
            upcoming = schedule.next_after(now)
            if upcoming is None:
                return
            if stop.wait((upcoming - now).total_seconds()):
                return
            self._fire(timer)

    def _run_fixed(self, timer, stop) -> None:
        while timer.enabled():
            now = datetime.now()
            wake = timer.next_wake_time(now)
            _log.info("timer %08x sleeps %ds", timer.id, (wake - now).total_seconds())
            if stop.wait(max(0.0, (wake - now).total_seconds())):
                return
            if timer.should_fire():
                self._fire(timer)

    def cancel_timer(self, key) -> bool:
        """Stop and forget the timer with ``key``; False if there is none."""
        timer = self.get_timer(key)
        if timer is None:
            return False
        self._stop_worker(key)
        if not timer.cron:
            timer.disable()
        with self._lock:
            self._timers.pop(key, None)
        try:
            with self._db_lock:
                self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                self._db.commit()
        except sqlite3.Error:
            return False
        return True

    def list_timers(self, group_id) -> list[str]:
        """Readable descriptions of every timer of one group."""
        with self._lock:
            timers = [t for t in self._timers.values() if t.group_id == group_id]
        lines = []
        for timer in timers:
            info = timer.timer_info()
            text = info[info.index("]") + 1:] + "\n"
            text = text.replace("-1", "每")
            text = text.replace("月0日0周", "月周天")
            text = text.replace("月0日", "月")
            text = text.replace("日0周", "日")
            lines.append(text)
        return lines

    def get_timer(self, key):
        """The registered timer with ``key``, or None."""
        with self._lock:
            return self._timers.get(key)

    def add_timer_to_db(self, timer) -> None:
        with self._db_lock:
            self._db.execute(
                "INSERT OR REPLACE INTO timer (id, emdwhm, sid, gid, alert, cron, url) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (timer.id, timer.emdwhm, timer.self_id, timer.group_id,
                 timer.alert, timer.cron, timer.url),
            )
            self._db.commit()

    def add_timer_to_map(self, timer) -> None:
        with self._lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop every worker and close the database."""
        with self._lock:
            stops = list(self._stops.values())
            self._stops.clear()
        for stop in stops:
            stop.set()
        with self._db_lock:
            self._db.close()