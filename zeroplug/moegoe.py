"""Text-to-speech requests for Japanese, Korean and Chinese voice models."""

from __future__ import annotations

import unicodedata
from urllib.parse import quote_plus

JP_API = "https://moegoe.azurewebsites.net/api/speak?text={}&id={}"
KR_API = "https://moegoe.azurewebsites.net/api/speakkr?text={}&id={}"
CN_API = "https://genshin.azurewebsites.net/api/speak?format=mp3&text={}&id={}"

JP_SPEAKERS = {"宁宁": 0, "爱瑠": 1, "芳乃": 2, "茉子": 3, "丛雨": 4, "小春": 5, "七海": 6}
KR_SPEAKERS = {"Sua": 0, "Mimiru": 1, "Arin": 2, "Yeonhwa": 3, "Yuhwa": 4, "Seonbae": 5}
CN_SPEAKERS = {
    name: index
    for index, name in enumerate(
        "派蒙 凯亚 安柏 丽莎 琴 香菱 枫原万叶 迪卢克 温迪 可莉 早柚 托马 芭芭拉 优菈 云堇 "
        "钟离 魈 凝光 雷电将军 北斗 甘雨 七七 刻晴 神里绫华 戴因斯雷布 雷泽 神里绫人 "
        "罗莎莉亚 阿贝多 八重神子 宵宫 荒泷一斗 九条裟罗 夜兰 珊瑚宫心海 五郎 散兵 女士 "
        "达达利亚 莫娜 班尼特 申鹤 行秋 烟绯 久岐忍 辛焱 砂糖 胡桃 重云 菲谢尔 诺艾尔 "
        "迪奥娜 鹿野院平藏".split()
    )
}
# Voices that exist in the model but are not offered by the command.
_CN_HIDDEN = {"戴因斯雷布", "散兵", "女士"}

_ASCII_SPACE = set("\t\n\f\r ")


def _common(char: str) -> bool:
    return (
        char in _ASCII_SPACE
        or unicodedata.category(char).startswith("P")
    )


def _ascii_alnum(char: str) -> bool:
    return ("A" <= char <= "Z") or ("a" <= char <= "z") or ("0" <= char <= "9")


def _jp_char(char: str) -> bool:
    return (
        _common(char)
        or _ascii_alnum(char)
        or char == "\u3005"
        or "\u3040" <= char <= "\u30ff"
        or "\u4e00" <= char <= "\u9fff"
        or "\uff11" <= char <= "\uff19"
        or "\uff21" <= char <= "\uff3a"
        or "\uff41" <= char <= "\uff5a"
        or "\uff66" <= char <= "\uff9d"
    )


def _kr_char(char: str) -> bool:
    return (
        _common(char)
        or _ascii_alnum(char)
        or "\u3131" <= char <= "\u3163"
        or "\uac00" <= char <= "\ud7ff"
    )


def _cn_char(char: str) -> bool:
    return _common(char) or "\u4e00" <= char <= "\u9fa5"


_COMMANDS = (
    (list(JP_SPEAKERS), _jp_char),
    (list(KR_SPEAKERS), _kr_char),
    ([name for name in CN_SPEAKERS if name not in _CN_HIDDEN], _cn_char),
)


def parse_request(text) -> tuple[str, str]:
    """Split ``让<speaker>说<text>`` into speaker and text.

    Raises ValueError when the command names no offered speaker or the text
    holds characters that speaker's language does not accept.
    """
    if text.startswith("让"):
        rest = text[1:]
        for names, accepts in _COMMANDS:
            for name in names:
                prefix = name + "说"
                if not rest.startswith(prefix):
                    continue
                speech = rest[len(prefix):]
                if speech and all(accepts(char) for char in speech):
                    return name, speech
    raise ValueError(f"not a speech request: {text!r}")


def moegoe_url(speaker, text) -> str:
    """URL of the audio with ``speaker`` reading ``text``."""
    for table, api in ((JP_SPEAKERS, JP_API), (KR_SPEAKERS, KR_API), (CN_SPEAKERS, CN_API)):
        if speaker in table:
            return api.format(quote_plus(text, safe=""), table[speaker])
    raise KeyError(speaker)