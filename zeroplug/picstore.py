"""A store of picture URLs keyed by their CRC-64 checksum."""

from __future__ import annotations

import re
import sqlite3
import threading

API = "http://jandan.net/pic"

_ISO_POLY = 0xD800000000000000
_MASK64 = 0xFFFFFFFF_FFFFFFFF
_DIGITS = re.compile(r"\d+")


def _make_table(poly: int) -> tuple[int, ...]:
    table = []
    for value in range(256):
        crc = value
        for _ in range(8):
            crc = (crc >> 1) ^ poly if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_ISO_TABLE = _make_table(_ISO_POLY)


def url_id(url) -> int:
    """CRC-64 (ISO polynomial) of the URL, used as the picture id."""
    crc = _MASK64
    for byte in url.encode("utf-8"):
        crc = _ISO_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK64


def _signed(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


def current_page(text) -> int:
    """The first number in the current-page label of the listing."""
    match = _DIGITS.search(text)
    if match is None:
        raise ValueError(f"no page number in {text!r}")
    return int(match.group())


class PictureStore:
    """Picture URLs kept in SQLite."""

    def __init__(self, path):
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.RLock()
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS picture "
                "(id INTEGER PRIMARY KEY NOT NULL, url TEXT NOT NULL)"
            )
            self._db.commit()

    def add(self, url) -> bool:
        """Store a URL; False if it was already present."""
        with self._lock:
            cursor = self._db.execute(
                "INSERT OR IGNORE INTO picture (id, url) VALUES (?, ?)",
                (_signed(url_id(url)), url),
            )
            self._db.commit()
            return cursor.rowcount == 1

    def contains(self, url) -> bool:
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM picture WHERE id = ?", (_signed(url_id(url)),)
            ).fetchone()
        return row is not None

    def random(self) -> str:
        """A random stored URL; LookupError when the store is empty."""
        with self._lock:
            row = self._db.execute(
                "SELECT url FROM picture ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError("no pictures")
        return row[0]

    def count(self) -> int:
        with self._lock:
            return self._db.execute("SELECT COUNT(*) FROM picture").fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._db.close()