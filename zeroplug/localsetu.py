"""Index of local pictures grouped into classes by folder, keyed by difference hash."""

from __future__ import annotations

import io
import logging
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

_log = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")
_HASH_WIDTH = 9
_HASH_HEIGHT = 8


def difference_hash(image) -> int:
    """64-bit difference hash of a PIL image, as a signed integer.

    The image is reduced to 9x8 grey pixels; each bit records whether a pixel
    is darker than its right-hand neighbour, the first pair being the top bit.
    """
    gray = image.convert("L").resize((_HASH_WIDTH, _HASH_HEIGHT), Image.Resampling.BILINEAR)
    data = gray.tobytes()
    rows = (data[start:start + _HASH_WIDTH] for start in range(0, len(data), _HASH_WIDTH))
    value = 0
    for row in rows:
        for left, right in zip(row, row[1:]):
            value = (value << 1) | (left < right)
    return value - (1 << 64) if value >= 1 << 63 else value


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class SetuEntry:
    """One indexed picture."""

    img_id: int
    name: str
    path: str


class SetuIndex:
    """Picture classes kept as one SQLite table per folder name."""

    def __init__(self, db_path):
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._lock = threading.RLock()

    def classes(self) -> list[str]:
        """Names of every indexed class."""
        with self._lock:
            rows = self._db.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' "
                "AND name NOT LIKE 'sqlite_%' ORDER BY name"
            ).fetchall()
        return [row[0] for row in rows]

    def _create(self, name: str) -> None:
        self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {_quote(name)} ("
            "imgid INTEGER PRIMARY KEY NOT NULL, "
            "name TEXT NOT NULL, "
            "path TEXT NOT NULL)"
        )

    def scan_all(self, root) -> None:
        """Forget the whole index and rebuild it from every folder under ``root``."""
        root = Path(root)
        with self._lock:
            for name in self.classes():
                self._db.execute(f"DROP TABLE IF EXISTS {_quote(name)}")
            self._db.commit()
        self._walk(root, "")

    def _walk(self, root: Path, relative: str) -> None:
        folder = root / relative if relative else root
        for entry in sorted(folder.iterdir(), key=lambda p: p.name):
            if not entry.is_dir():
                continue
            child = f"{relative}/{entry.name}" if relative else entry.name
            with self._lock:
                self._create(entry.name)
                self._db.commit()
            self._scan(root, child, entry.name)
            self._walk(root, child)

    def scan_class(self, root, name) -> None:
        """Rebuild the class ``name`` from the folder of that name under ``root``."""
        self._scan(Path(root), name, name)

    def _scan(self, root: Path, relative: str, name: str) -> None:
        folder = root / relative
        entries = sorted(folder.iterdir(), key=lambda p: p.name)
        with self._lock:
            self._db.execute(f"DROP TABLE IF EXISTS {_quote(name)}")
            self._create(name)
            self._db.commit()
        for entry in entries:
            if entry.is_dir() or not entry.name.lower().endswith(IMAGE_SUFFIXES):
                continue
            rel_path = f"{relative}/{entry.name}"
            _log.debug("read %s", rel_path)
            with Image.open(io.BytesIO(entry.read_bytes())) as image:
                image.load()
                img_id = difference_hash(image)
            _log.debug("insert %s with id %d into %s", entry.name, img_id, name)
            with self._lock:
                self._db.execute(
                    f"INSERT OR REPLACE INTO {_quote(name)} (imgid, name, path) "
                    "VALUES (?, ?, ?)",
                    (img_id, entry.name, rel_path),
                )
                self._db.commit()

    def _require(self, name: str) -> None:
        if name not in self.classes():
            raise LookupError(f"no class {name!r}")

    def pick(self, name) -> SetuEntry:
        """A random picture of class ``name``; LookupError if there is none."""
        self._require(name)
        with self._lock:
            row = self._db.execute(
                f"SELECT imgid, name, path FROM {_quote(name)} ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError(f"class {name!r} is empty")
        return SetuEntry(*row)

    def count(self, name) -> int:
        self._require(name)
        with self._lock:
            return self._db.execute(f"SELECT COUNT(*) FROM {_quote(name)}").fetchone()[0]

    def summary(self) -> str:
        """Overview listing each class with its picture count."""
        lines = ["本地setu分类一览"]
        names = self.classes()
        for index, name in enumerate(names):
            try:
                lines.append(f"{index:02d}. {name}({self.count(name)})")
            except sqlite3.Error:
                _log.exception("counting %s failed", name)
                lines.append(f"{index:02d}. {name}(error)")
        if not names:
            lines.append("空")
        return "\n".join(lines)

    def close(self) -> None:
        with self._lock:
            self._db.close()