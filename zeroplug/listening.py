"""Japanese listening materials kept in SQLite."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime as _datetime

CATEGORIES = {"听力": "tingli", "歌曲": "gequ"}

_COLUMNS = "id, title, page_url, category, intro, audio_url, content, datetime"


@dataclass
class ListeningItem:
    """One listening material or song."""

    id: int = 0
    title: str = ""
    page_url: str = ""
    category: str = ""
    intro: str = ""
    audio_url: str = ""
    content: str = ""
    datetime: _datetime | None = None


def _row_to_item(row) -> ListeningItem:
    stamp = _datetime.fromisoformat(row[7]) if row[7] else None
    return ListeningItem(*row[:7], stamp)


class ListeningStore:
    """Random access to listening materials by category and keyword."""

    def __init__(self, path):
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS item ("
                "id INTEGER PRIMARY KEY NOT NULL, title TEXT NOT NULL, "
                "page_url TEXT NOT NULL, category TEXT NOT NULL, intro TEXT NOT NULL, "
                "audio_url TEXT NOT NULL, content TEXT NOT NULL, datetime TEXT)"
            )
            self._db.commit()

    def add(self, item) -> None:
        stamp = item.datetime.isoformat() if item.datetime else None
        with self._lock:
            self._db.execute(
                f"INSERT OR REPLACE INTO item ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (item.id, item.title, item.page_url, item.category, item.intro,
                 item.audio_url, item.content, stamp),
            )
            self._db.commit()

    def _random(self, where: str, params: tuple):
        with self._lock:
            row = self._db.execute(
                f"SELECT {_COLUMNS} FROM item WHERE {where} ORDER BY RANDOM() LIMIT 1",
                params,
            ).fetchone()
        return None if row is None else _row_to_item(row)

    def random_by_category(self, category):
        """A random item of ``category``, or None."""
        return self._random("category = ?", (category,))

    def random_by_keyword(self, category, keyword):
        """A random item of ``category`` whose title or content holds ``keyword``."""
        pattern = f"%{keyword}%"
        return self._random(
            "category = ? AND (title LIKE ? OR content LIKE ?)",
            (category, pattern, pattern),
        )

    def count(self) -> int:
        with self._lock:
            return self._db.execute("SELECT COUNT(*) FROM item").fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._db.close()