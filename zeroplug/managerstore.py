"""Storage and helpers for group welcome texts and gist-verified joins."""

from __future__ import annotations

import hashlib
import re
import sqlite3
import threading
import time

GIST_RAW = "https://gist.githubusercontent.com/{}/{}/raw/{}"
ANSWER_MARKER = "答案："
GIST_WINDOW = 600

_TIMESTAMP = re.compile(r"[+-]?[0-9]+")

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS welcome (gid INTEGER PRIMARY KEY NOT NULL, msg TEXT NOT NULL)",
    "CREATE TABLE IF NOT EXISTS farewell (gid INTEGER PRIMARY KEY NOT NULL, msg TEXT NOT NULL)",
    "CREATE TABLE IF NOT EXISTS member (qq INTEGER PRIMARY KEY NOT NULL, ghun TEXT NOT NULL)",
)


class ManagerStore:
    """Welcome and farewell texts per group, and members verified through gists."""

    def __init__(self, path):
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock:
            for statement in _SCHEMA:
                self._db.execute(statement)
            self._db.commit()

    def _put_text(self, table: str, group_id: int, text: str) -> None:
        with self._lock:
            self._db.execute(
                f"INSERT OR REPLACE INTO {table} (gid, msg) VALUES (?, ?)",
                (group_id, text),
            )
            self._db.commit()

    def _get_text(self, table: str, group_id: int):
        with self._lock:
            row = self._db.execute(
                f"SELECT msg FROM {table} WHERE gid = ?", (group_id,)
            ).fetchone()
        return None if row is None else row[0]

    def set_welcome(self, group_id, text) -> None:
        self._put_text("welcome", group_id, text)

    def welcome(self, group_id):
        """The welcome template of a group, or None when none is set."""
        return self._get_text("welcome", group_id)

    def set_farewell(self, group_id, text) -> None:
        self._put_text("farewell", group_id, text)

    def farewell(self, group_id):
        """The farewell template of a group, or None when none is set."""
        return self._get_text("farewell", group_id)

    def has_member(self, username) -> bool:
        """Whether a GitHub user has already joined."""
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM member WHERE ghun = ?", (username,)
            ).fetchone()
        return row is not None

    def add_member(self, qq, username) -> None:
        with self._lock:
            self._db.execute(
                "INSERT OR REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, username)
            )
            self._db.commit()

    def close(self) -> None:
        with self._lock:
            self._db.close()


def render_welcome(template, user_id, nickname, group_id, group_name) -> str:
    """Fill the placeholders of a welcome or farewell template with CQ codes."""
    uid = str(user_id)
    replacements = (
        ("{at}", f"[CQ:at,qq={uid}]"),
        ("{nickname}", nickname),
        ("{avatar}", f"[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk={uid}&s=640]"),
        ("{uid}", uid),
        ("{gid}", str(group_id)),
        ("{groupname}", group_name),
    )
    text = template
    for placeholder, value in replacements:
        text = text.replace(placeholder, value)
    return text


def parse_join_answer(comment) -> tuple[str, str]:
    """Split a join request answer of the form ``username/gisthash``."""
    start = comment.find(ANSWER_MARKER)
    if start < 0:
        raise ValueError("格式错误!")
    answer = comment[start + len(ANSWER_MARKER):]
    slash = answer.find("/")
    if slash <= 0:
        raise ValueError("格式错误!")
    return answer[:slash], answer[slash + 1:]


def gist_url(username, gist_hash, group_id) -> str:
    """Raw gist file named after the md5 of the group number."""
    name = hashlib.md5(str(group_id).encode("ascii")).hexdigest()
    return GIST_RAW.format(username, gist_hash, name)


def check_new_user(store, qq, group_id, username, gist_hash, fetch, now=None):
    """Verify a join request against its gist.

    ``fetch`` takes a URL and returns the file content.  Returns ``(True, "")``
    and records the member on success, otherwise ``(False, reason)``.
    """
    if store.has_member(username):
        return False, "该github用户已入群"
    try:
        data = fetch(gist_url(username, gist_hash, group_id))
    except Exception as err:  # noqa: BLE001 - any fetch failure is a rejection reason
        return False, "无法连接到gist: " + str(err)
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    if not _TIMESTAMP.fullmatch(data):
        return False, "时间戳格式错误: " + data
    stamp = int(data)
    now = time.time() if now is None else now
    if abs(int(now) - stamp) < GIST_WINDOW:
        store.add_member(qq, username)
        return True, ""
    return False, "时间戳超时"