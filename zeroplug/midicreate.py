"""Simple note-string MIDI composition and ear-training helpers."""

from __future__ import annotations

import io
import math
import random
import subprocess
from pathlib import Path

import mido

TICKS_PER_QUARTER = 960
TEMPO_BPM = 72
DEFAULT_TIMBRE = 40
NOTE_VELOCITY = 120
DEFAULT_LEVEL = 5

MIN_TARGET = 55
TARGET_SPAN = 34

PERSONAL_MAX_ERRORS = 3
TEAM_MAX_ERRORS = 10
MAX_ROUND = 6

NOTE_MAP = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}

_BYTE = 0xFF
_UINT32 = 0xFFFFFFFF
_PERSONAL_SCORES = {0: 1.0, 1: 0.5, 2: 0.2}


def note_name(note) -> str:
    """Pitch-class name of a MIDI note, using flats for black keys."""
    for name, value in NOTE_MAP.items():
        if value % 12 == note % 12:
            return name
    return ""


def octave(base, level) -> int:
    """MIDI note of pitch class ``base`` in octave ``level`` (byte arithmetic)."""
    base &= _BYTE
    level = min(level & _BYTE, 10)
    if level == 0:
        return base
    result = (base + 12 * level) & _BYTE
    if result > 127:
        result = (result - 12) & _BYTE
    return result


def process_one(note) -> int:
    """Read a single note such as ``C#6`` into its MIDI number.

    Characters that are not note letters, accidentals or digits are ignored;
    a missing octave means octave 5.
    """
    text = note.replace(" ", "")
    base = 0
    level = 0
    for char in text:
        if "A" <= char <= "G":
            base = NOTE_MAP[char] % 12
        elif char == "b":
            base = (base - 1) & _BYTE
        elif char == "#":
            base = (base + 1) & _BYTE
        elif "0" <= char <= "9":
            level = (level * 10 + int(char)) & _BYTE
    if level == 0:
        level = DEFAULT_LEVEL
    return octave(base, level)


def _atoi(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def _ticks(length: int) -> int:
    if length >= 0:
        factor = (1 << length) & _UINT32 if length < 32 else 0
        return (TICKS_PER_QUARTER * factor) & _UINT32
    shift = -length
    if shift >= 32:
        raise ValueError(f"note length 2^{length} is too short")
    return TICKS_PER_QUARTER // (1 << shift)


def _parse_notes(text: str):
    """Yield ``(delay, note, duration)`` for every note in a note string."""
    k = text.replace(" ", "")
    delay = 0
    i = 0
    while i < len(k):
        base = 0
        level = 0
        rest = False
        length_text = ""
        while True:
            char = k[i]
            if char == "R":
                rest = True
                i += 1
            elif "A" <= char <= "G":
                base = NOTE_MAP[char] % 12
                i += 1
            elif char == "b":
                base = (base - 1) & _BYTE
                i += 1
            elif char == "#":
                base = (base + 1) & _BYTE
                i += 1
            elif "0" <= char <= "9":
                level = (level * 10 + int(char)) & _BYTE
                i += 1
            elif char == "<":
                i += 1
                start = i
                while i < len(k) and (k[i] == "-" or "0" <= k[i] <= "9"):
                    i += 1
                length_text += k[start:i]
            else:
                raise ValueError(f"无法解析第{i}个位置的{char}字符")
            if i >= len(k) or "A" <= k[i] <= "G" or k[i] == "R":
                break
        length = _atoi(length_text)
        if rest:
            delay = _ticks(length)
            continue
        if level == 0:
            level = DEFAULT_LEVEL
        yield delay, octave(base, level), _ticks(length)
        delay = 0


def check_timbre(timbre) -> int:
    """Validate a General MIDI program number."""
    timbre = int(timbre)
    if timbre < 0 or timbre > 127:
        raise ValueError("音色应该在0~127之间")
    return timbre


def make_midi(text, path, timbre=DEFAULT_TIMBRE) -> Path:
    """Write the note string ``text`` as a MIDI file at ``path``.

    An existing file is left untouched.  Raises ValueError on characters the
    note syntax does not allow.
    """
    path = Path(path)
    if path.exists():
        return path
    program = check_timbre(timbre)
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(TEMPO_BPM), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=program, time=0))
    for delay, note, duration in _parse_notes(text):
        track.append(
            mido.Message("note_on", channel=0, note=note, velocity=NOTE_VELOCITY, time=delay)
        )
        track.append(mido.Message("note_off", channel=0, note=note, velocity=0, time=duration))
    track.append(mido.MetaMessage("end_of_track", time=0))

    midi = mido.MidiFile(type=0, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(track)
    midi.save(str(path))
    return path


def _round_away(value: float) -> int:
    if value >= 0:
        return math.floor(value + 0.5)
    return -math.floor(-value + 0.5)


def _power(length: float):
    if length <= 0:
        return None
    return _round_away(math.log2(length))


def midi_to_text(data, track) -> str:
    """Turn one track of a MIDI file into the note string syntax.

    ``data`` holds the file's bytes.  Raises IndexError for a missing track.
    """
    midi = mido.MidiFile(file=io.BytesIO(bytes(data)))
    messages = midi.tracks[track]
    start_tick = 0.0
    end_tick = 0.0
    start_note = 0
    end_note = 0
    absolute = 0
    parts = []
    for msg in messages:
        absolute += msg.time
        if msg.is_meta:
            continue
        sounding = msg.type == "note_on" and msg.velocity > 0
        if sounding:
            start_tick = float(absolute)
            start_note = msg.note
        if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            end_tick = float(absolute)
            end_note = msg.note
            if start_note == end_note:
                parts.append(note_name(msg.note))
                level = msg.note // 12
                if level != DEFAULT_LEVEL:
                    parts.append(str(level))
                power = _power((end_tick - start_tick) / TICKS_PER_QUARTER)
                if power is not None and power >= -4 and power != 0:
                    parts.append(f"<{power}")
                start_note = 0
                end_note = 0
        if sounding and start_tick > end_tick:
            power = _power((start_tick - end_tick) / TICKS_PER_QUARTER)
            if power == 0:
                parts.append("R")
            elif power is not None and power >= -4:
                parts.append(f"R<{power}")
    return "".join(parts)


def render_wav(midi_path, wav_path=None) -> str:
    """Render a MIDI file to WAV with timidity; returns the WAV path."""
    midi_path = str(midi_path)
    wav_path = midi_path.replace(".mid", ".wav") if wav_path is None else str(wav_path)
    subprocess.run(["timidity", midi_path, "-Ow", "-o", wav_path], check=True)
    return wav_path


def random_target(rng=None) -> int:
    """A random note for the listening exercise."""
    return MIN_TARGET + (rng or random).randrange(TARGET_SPAN)


def target_answer(note) -> str:
    """The expected answer for a target note, e.g. ``C#6`` style."""
    return note_name(note) + str(note // 12)


def round_score(error_count, team, max_errors) -> float:
    """Points for finishing a round after ``error_count`` wrong answers."""
    if team:
        return 1.0 if error_count != max_errors else 0.0
    return _PERSONAL_SCORES.get(error_count, 0.0)