import pytest

from zeroplug.hyaku import LABELS, image_names, load_poems, parse_poems


def make_csv(count=100, start=1):
    rows = [",".join(LABELS)]
    rows += [
        f"{i},poet{i},up{i},low{i},kup{i},klow{i}" for i in range(start, start + count)
    ]
    return "\n".join(rows) + "\n"


def test_parse_poems():
    poems = parse_poems(make_csv())
    assert len(poems) == 100
    assert poems[0].number == "1"
    assert poems[99].poet == "poet100"
    assert poems[41].lower_kana == "klow42"


def test_poem_str_layout():
    poem = parse_poems(make_csv())[0]
    lines = str(poem).splitlines()
    assert lines[0] == "●番号：1"
    assert len(lines) == 6
    assert [line[1:].split("：")[0] for line in lines] == list(LABELS)
    assert str(poem).endswith("klow1\n")


@pytest.mark.parametrize(
    "text",
    [
        make_csv(count=99),
        make_csv(start=2),
        make_csv().replace("poet5,", "poet5,extra,"),
    ],
)
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_poems(text)


def test_load_poems(tmp_path):
    path = tmp_path / "hyaku.csv"
    path.write_text(make_csv(), encoding="utf-8")
    assert load_poems(path) == parse_poems(make_csv())


def test_image_names():
    assert image_names(1) == ("img/001.jpg", "img/001.png")
    assert image_names(100)[0].endswith("100.jpg")
    for bad in (0, 101):
        with pytest.raises(ValueError):
            image_names(bad)