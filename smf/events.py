"""Typed track events decoded from SMF track chunks.

Events fall into three families, each selected by the status byte that
follows an event's delta-time:

  0xF0 / 0xF7   system exclusive, VLQ length + raw bytes
  0xFF          meta, type byte + VLQ length + payload
  0x80..0xEF    channel voice, high nibble is the message type, low nibble
                the channel, followed by one or two 7-bit data bytes

Every event is a frozen dataclass carrying an explicit ``kind`` so consumers
can dispatch with ``event.kind`` instead of ``isinstance`` checks.
``delta_time`` is the tick distance from the previous event in the track and
``absolute_time`` the running sum of delta-times from the track start.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

MICROSECONDS_PER_MINUTE = 60_000_000
PITCH_BEND_CENTER = 8192


class EventKind(str, Enum):
    # channel voice
    NOTE_OFF = "noteOff"
    NOTE_ON = "noteOn"
    NOTE_AFTERTOUCH = "noteAftertouch"
    CONTROLLER = "midiController"
    PROGRAM_CHANGE = "programChange"
    CHANNEL_AFTERTOUCH = "channelAftertouch"
    PITCH_BEND = "pitchBend"
    # meta
    TEXT = "text"
    COPYRIGHT = "copyright"
    SEQUENCE = "sequence"
    INSTRUMENT_NAME = "instrumentName"
    LYRIC = "lyric"
    MARKER = "marker"
    CUE_POINT = "cuePoint"
    CHANNEL_PREFIX = "channelPrefix"
    END_OF_TRACK = "endOfTrack"
    SET_TEMPO = "setTempo"
    SMPTE_OFFSET = "smpteOffset"
    TIME_SIGNATURE = "timeSignature"
    KEY_SIGNATURE = "keySignature"
    SEQUENCER_SPECIFIC = "sequencerSpecific"
    UNKNOWN_META = "unknownMetaEvent"
    # system exclusive
    SYSEX_MESSAGE = "sysexMessage"
    ESCAPE_SEQUENCE = "escapeSequence"

    @property
    def family(self) -> str:
        if self in CHANNEL_KINDS:
            return "channel"
        if self in SYSEX_KINDS:
            return "sysex"
        return "meta"


CHANNEL_KINDS = frozenset(
    {
        EventKind.NOTE_OFF,
        EventKind.NOTE_ON,
        EventKind.NOTE_AFTERTOUCH,
        EventKind.CONTROLLER,
        EventKind.PROGRAM_CHANGE,
        EventKind.CHANNEL_AFTERTOUCH,
        EventKind.PITCH_BEND,
    }
)
SYSEX_KINDS = frozenset({EventKind.SYSEX_MESSAGE, EventKind.ESCAPE_SEQUENCE})
TEXT_KINDS = frozenset(
    {
        EventKind.TEXT,
        EventKind.COPYRIGHT,
        EventKind.SEQUENCE,
        EventKind.INSTRUMENT_NAME,
        EventKind.LYRIC,
        EventKind.MARKER,
        EventKind.CUE_POINT,
    }
)


@dataclass(frozen=True)
class Event:
    kind: EventKind
    delta_time: int
    absolute_time: int

    @property
    def family(self) -> str:
        return self.kind.family

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["kind"] = self.kind.value
        for key, value in out.items():
            if isinstance(value, bytes):
                out[key] = list(value)
        return out


# ── channel voice ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class NoteEvent(Event):
    """Note on/off.  A note-on with velocity 0 is decoded as note-off."""

    channel: int
    note_number: int
    velocity: int


@dataclass(frozen=True)
class NoteAftertouchEvent(Event):
    channel: int
    note_number: int
    amount: int


@dataclass(frozen=True)
class ControllerEvent(Event):
    channel: int
    controller: int
    value: int


@dataclass(frozen=True)
class ProgramChangeEvent(Event):
    channel: int
    program_number: int


@dataclass(frozen=True)
class ChannelAftertouchEvent(Event):
    channel: int
    amount: int


@dataclass(frozen=True)
class PitchBendEvent(Event):
    """Pitch wheel position.

    ``raw`` is the 14-bit value (LSB first on the wire); ``value`` is
    ``(raw - 8192) / 8192``, i.e. -1.0 at the bottom, 0.0 at the centre and
    just under +1.0 at the top.
    """

    channel: int
    raw: int
    value: float


# ── meta ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TextEvent(Event):
    """Any of the text-bearing meta events (0x01-0x07)."""

    text: str


@dataclass(frozen=True)
class ChannelPrefixEvent(Event):
    channel: int


@dataclass(frozen=True)
class EndOfTrackEvent(Event):
    pass


@dataclass(frozen=True)
class SetTempoEvent(Event):
    microseconds_per_quarter: int

    @property
    def bpm(self) -> Optional[float]:
        if self.microseconds_per_quarter == 0:
            return None
        return MICROSECONDS_PER_MINUTE / self.microseconds_per_quarter


@dataclass(frozen=True)
class SmpteOffsetEvent(Event):
    hr: int
    mn: int
    se: int
    fr: int
    ff: int


@dataclass(frozen=True)
class TimeSignatureEvent(Event):
    nn: int  # numerator
    dd: int  # denominator as a power of two
    cc: int  # MIDI clocks per metronome click
    bb: int  # notated 32nd notes per quarter

    @property
    def denominator(self) -> int:
        return 2 ** self.dd


@dataclass(frozen=True)
class KeySignatureEvent(Event):
    sf: int  # raw byte; see sharps_flats
    mi: int  # 0 major, 1 minor

    @property
    def sharps_flats(self) -> int:
        """Number of sharps (positive) or flats (negative)."""
        return self.sf - 0x100 if self.sf & 0x80 else self.sf

    @property
    def is_minor(self) -> bool:
        return self.mi == 1


@dataclass(frozen=True)
class SequencerSpecificEvent(Event):
    data: bytes


@dataclass(frozen=True)
class UnknownMetaEvent(Event):
    meta_type: int


# ── system exclusive ──────────────────────────────────────────────────


@dataclass(frozen=True)
class SysexEvent(Event):
    data: bytes


ChannelEvent = Union[
    NoteEvent,
    NoteAftertouchEvent,
    ControllerEvent,
    ProgramChangeEvent,
    ChannelAftertouchEvent,
    PitchBendEvent,
]
MetaEvent = Union[
    TextEvent,
    ChannelPrefixEvent,
    EndOfTrackEvent,
    SetTempoEvent,
    SmpteOffsetEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    SequencerSpecificEvent,
    UnknownMetaEvent,
]
TrackEvent = Union[ChannelEvent, MetaEvent, SysexEvent]


__all__ = [
    "CHANNEL_KINDS",
    "ChannelAftertouchEvent",
    "ChannelEvent",
    "ChannelPrefixEvent",
    "ControllerEvent",
    "EndOfTrackEvent",
    "Event",
    "EventKind",
    "KeySignatureEvent",
    "MetaEvent",
    "NoteAftertouchEvent",
    "NoteEvent",
    "PITCH_BEND_CENTER",
    "PitchBendEvent",
    "ProgramChangeEvent",
    "SYSEX_KINDS",
    "SequencerSpecificEvent",
    "SetTempoEvent",
    "SmpteOffsetEvent",
    "SysexEvent",
    "TEXT_KINDS",
    "TextEvent",
    "TimeSignatureEvent",
    "TrackEvent",
    "UnknownMetaEvent",
]
