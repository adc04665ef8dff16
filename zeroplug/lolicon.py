"""Random picture API responses and a small prefetch queue."""

from __future__ import annotations

import json
import queue
from urllib.parse import quote_plus

API = "https://api.lolicon.app/setu/v2"
CAPACITY = 10
REFILL_BATCH = 2
WAIT_SECONDS = 60.0


def lolicon_image_url(payload) -> str:
    """The original picture URL from an API response.

    Raises ValueError carrying the API's error text, and LookupError when the
    response holds no picture.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8")
    document = json.loads(payload)
    error = document.get("error")
    if isinstance(error, str) and error:
        raise ValueError(error)
    url = ""
    data = document.get("data")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        urls = data[0].get("urls")
        if isinstance(urls, dict) and isinstance(urls.get("original"), str):
            url = urls["original"]
    if not url:
        raise LookupError("未找到相关内容, 换个tag试试吧")
    return url.replace("i.pixiv.cat", "i.pixiv.re")


def tag_url(tag) -> str:
    """API URL asking for a picture with ``tag``."""
    return API + "?tag=" + quote_plus(tag)


def image_name(url) -> str:
    """File name of a picture URL without its four-character extension."""
    start = url.rfind("/") + 1
    return url[start:len(url) - 4]


class ImageQueue:
    """Bounded queue of picture URLs filled ahead of requests."""

    def __init__(self, capacity=CAPACITY):
        self._queue: queue.Queue[str] = queue.Queue(maxsize=capacity)
        self._capacity = capacity

    def refill_count(self) -> int:
        """How many pictures to fetch now: free space, at most two."""
        return min(self._capacity - self._queue.qsize(), REFILL_BATCH)

    def put(self, url) -> None:
        """Add a URL, waiting for room when the queue is full."""
        self._queue.put(url)

    def get(self, timeout=WAIT_SECONDS) -> str:
        """Take the oldest URL; TimeoutError if none arrives in time."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError("等待填充，请稍后再试......") from None