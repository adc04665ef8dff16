"""The Hyakunin Isshu poem collection."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, fields
from pathlib import Path

BED = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"
POEM_COUNT = 100

LABELS = ("番号", "歌人", "上の句", "下の句", "上の句ひらがな", "下の句ひらがな")
_MARKERS = ("●", "◉", "○", "○", "◎", "◎")


@dataclass(frozen=True)
class Poem:
    number: str
    poet: str
    upper: str
    lower: str
    upper_kana: str
    lower_kana: str

    def __str__(self) -> str:
        values = (getattr(self, f.name) for f in fields(self))
        return "".join(
            f"{marker}{label}：{value}\n"
            for marker, label, value in zip(_MARKERS, LABELS, values)
        )


def parse_poems(text) -> list[Poem]:
    """Parse the CSV with a title row followed by exactly 100 numbered poems."""
    records = list(csv.reader(io.StringIO(text)))[1:]
    if len(records) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    poems = []
    for expected, record in enumerate(records, start=1):
        if len(record) != len(LABELS):
            raise ValueError("invalid csvfile")
        if int(record[0]) != expected:
            raise ValueError("invalid csvfile")
        poems.append(Poem(*record))
    return poems


def load_poems(path) -> list[Poem]:
    return parse_poems(Path(path).read_text(encoding="utf-8-sig"))


def image_names(number) -> tuple[str, str]:
    """Names of the card picture and the text picture of poem ``number``."""
    if not 1 <= number <= POEM_COUNT:
        raise ValueError("超出范围")
    return f"img/{number:03d}.jpg", f"img/{number:03d}.png"