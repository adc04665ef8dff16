"""Small pure helpers behind the group management commands."""

from __future__ import annotations

import random
from datetime import datetime

MAX_BAN_MINUTES = 43199
_BAN_LIMIT = 43200

_MINUTES_PER_UNIT = {"分钟": 1, "小时": 60, "天": 60 * 24}
_SELF_MINUTES_PER_UNIT = {
    **{unit: 1 for unit in ("分钟", "min", "mins", "m")},
    **{unit: 60 for unit in ("小时", "hour", "hours", "h")},
    **{unit: 60 * 24 for unit in ("天", "day", "days", "d")},
}

VERIFY_FLAG = 0x1
GIST_FLAG = 0x10
_VERIFY_CLEAR_MASK = 0x7FFFFFFF_FFFFFFFE
_GIST_CLEAR_MASK = 0x7FFFFFFF_FFFFFFFD

LUCKY_POOL = 10
MAX_CARD_BYTES = 60
MAX_TITLE_BYTES = 18

_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"

_CQ_ESCAPES = (("&#44;", ","), ("&#91;", "["), ("&#93;", "]"), ("&amp;", "&"))


def _capped(minutes: int) -> int:
    return MAX_BAN_MINUTES if minutes >= _BAN_LIMIT else minutes


def ban_minutes(amount, unit) -> int:
    """Minutes to mute a member for; unknown units count as minutes."""
    return _capped(int(amount) * _MINUTES_PER_UNIT.get(unit, 1))


def self_ban_minutes(amount, unit) -> int:
    """Minutes for a self-requested mute, accepting English unit names too."""
    return _capped(int(amount) * _SELF_MINUTES_PER_UNIT.get(unit, 1))


def unescape_cq(content) -> str:
    """Undo the escaping applied to CQ code text."""
    for escaped, plain in _CQ_ESCAPES:
        content = content.replace(escaped, plain)
    return content


def set_verify_flag(data, enable) -> int:
    """Plugin data with the join-verification bit switched on or off."""
    return data | VERIFY_FLAG if enable else data & _VERIFY_CLEAR_MASK


def set_gist_flag(data, enable) -> int:
    """Plugin data with the gist auto-approval switch changed."""
    return data | GIST_FLAG if enable else data & _GIST_CLEAR_MASK


def pick_lucky(members, rng=None) -> dict:
    """Pick one of the ten members who spoke most recently."""
    if not members:
        raise ValueError("no members")
    ordered = sorted(members, key=lambda member: member.get("last_sent_time", 0))
    return (rng or random).choice(ordered[-LUCKY_POOL:])


def _stamp(value) -> str:
    return datetime.fromtimestamp(int(value)).strftime(_TIME_FORMAT)


def format_essence(info) -> str:
    """Describe one essence message entry."""
    return (
        f"信息ID: {int(info.get('message_id', 0))}\n"
        f"发送者昵称: {info.get('sender_nick', '')}\n"
        f"发送者QQ 号: {int(info.get('sender_id', 0))}\n"
        f"消息发送时间: {_stamp(info.get('sender_time', 0))}\n"
        f"操作者昵称: {info.get('operator_nick', '')}\n"
        f"操作者QQ 号: {int(info.get('operator_id', 0))}\n"
        f"精华设置时间: {_stamp(info.get('operator_time', 0))}"
    )


def check_card(card) -> str:
    """Return the group card if it fits, else raise ValueError."""
    if len(card.encode("utf-8")) > MAX_CARD_BYTES:
        raise ValueError("名字太长啦！")
    return card


def check_title(title) -> str:
    """Return the special title if it fits, else raise ValueError."""
    if len(title.encode("utf-8")) > MAX_TITLE_BYTES:
        raise ValueError("头衔太长啦！")
    return title