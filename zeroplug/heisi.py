"""Compact 10-byte picture records and random picking from them."""

from __future__ import annotations

import random
from pathlib import Path

ITEM_SIZE = 10

TEMPLATE_2021 = (
    "http://hs.heisiwu.com/wp-content/uploads/%4d/%02d/%4d%02d16%06d-611a3%8s.jpg"
)
TEMPLATE_GENERAL = "http://hs.heisiwu.com/wp-content/uploads/%4d/%02d/%015x"

EXTENSIONS = (".jpg", ".png", ".webp")

DATA_FILES = {
    "来点黑丝": "heisi.bin",
    "来点白丝": "baisi.bin",
    "来点jk": "jk.bin",
    "来点巨乳": "jur.bin",
    "来点足控": "zuk.bin",
    "来点网红": "mcn.bin",
}

_LOW_60_BITS = 0x0FFFFFFF_FFFFFFFF


def decode_item(raw) -> str:
    """Turn one packed 10-byte record into its picture URL."""
    raw = bytes(raw)
    if len(raw) != ITEM_SIZE:
        raise ValueError(f"item must be {ITEM_SIZE} bytes, got {len(raw)}")
    year = 2021 + (raw[0] >> 4)
    month = raw[0] & 0x0F
    if year == 2021:
        number = int.from_bytes(raw[1:5], "big")
        return TEMPLATE_2021 % (year, month, year, month, number, raw[5:9].hex())

    packed = int.from_bytes(raw[1:9], "big")
    url = TEMPLATE_GENERAL % (year, month, packed & _LOW_60_BITS)
    count = raw[9] & 0x7F
    if count:
        url += f"-{count}"
    if raw[9] & 0x80:
        url += "-scaled"
    extension = packed >> 60
    if extension >= len(EXTENSIONS):
        raise ValueError("invalid ext")
    return url + EXTENSIONS[extension]


def split_items(data) -> list[bytes]:
    """Split a data file into its 10-byte records."""
    data = bytes(data)
    if len(data) % ITEM_SIZE:
        raise ValueError("invalid data")
    return [data[start:start + ITEM_SIZE] for start in range(0, len(data), ITEM_SIZE)]


class PicturePool:
    """Picture records grouped by the command that asks for them."""

    def __init__(self, tables):
        self._tables = {command: list(items) for command, items in tables.items()}

    @classmethod
    def from_files(cls, folder) -> PicturePool:
        """Load every data file from ``folder``."""
        folder = Path(folder)
        tables = {}
        for index, (command, name) in enumerate(DATA_FILES.items()):
            data = (folder / name).read_bytes()
            try:
                tables[command] = split_items(data)
            except ValueError:
                raise ValueError(f"invalid data {index}") from None
        return cls(tables)

    def random_url(self, command, rng=None) -> str:
        """URL of a random picture for ``command``; KeyError if unknown."""
        items = self._tables[command]
        if not items:
            raise ValueError(f"no pictures for {command}")
        return decode_item((rng or random).choice(items))