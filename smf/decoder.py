"""Decode one MTrk chunk into typed events.

Each event is ``<delta-time VLQ> <status> <data...>``.  The status byte
selects the family:

  0xF0 / 0xF7   system exclusive, VLQ length + payload
  0xFF          meta, type byte + VLQ length + payload
  otherwise     channel voice, with running status: a byte below 0x80 is
                not a status at all but the first data byte of an event
                reusing the previous status, so it is pushed back and
                re-read as data.

Running status is remembered per track only.  Meta and sysex events leave
it untouched.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .errors import (
    InvalidMidiEventTypeError,
    InvalidTrackHeaderError,
    MetaLengthMismatchError,
    RunningStatusUninitializedError,
    TrackSizeMismatchError,
    UnsupportedSysexTypeError,
)
from .events import (
    PITCH_BEND_CENTER,
    ChannelAftertouchEvent,
    ChannelEvent,
    ChannelPrefixEvent,
    ControllerEvent,
    EndOfTrackEvent,
    EventKind,
    KeySignatureEvent,
    MetaEvent,
    NoteAftertouchEvent,
    NoteEvent,
    PitchBendEvent,
    ProgramChangeEvent,
    SequencerSpecificEvent,
    SetTempoEvent,
    SmpteOffsetEvent,
    SysexEvent,
    TextEvent,
    TimeSignatureEvent,
    TrackEvent,
    UnknownMetaEvent,
)
from .models import TRACK_TAG, Track
from .reader import ByteReader, Chunk

logger = logging.getLogger(__name__)

STATUS_SYSEX = 0xF0
STATUS_ESCAPE = 0xF7
STATUS_META = 0xFF

META_CHANNEL_PREFIX = 0x20
META_END_OF_TRACK = 0x2F
META_SET_TEMPO = 0x51
META_SMPTE_OFFSET = 0x54
META_TIME_SIGNATURE = 0x58
META_KEY_SIGNATURE = 0x59
META_SEQUENCER_SPECIFIC = 0x7F

META_TEXT_KINDS: Dict[int, EventKind] = {
    0x01: EventKind.TEXT,
    0x02: EventKind.COPYRIGHT,
    0x03: EventKind.SEQUENCE,
    0x04: EventKind.INSTRUMENT_NAME,
    0x05: EventKind.LYRIC,
    0x06: EventKind.MARKER,
    0x07: EventKind.CUE_POINT,
}

# Meta types whose payload length is fixed by the format.
META_FIXED_LENGTHS: Dict[int, int] = {
    META_CHANNEL_PREFIX: 1,
    META_END_OF_TRACK: 0,
    META_SET_TEMPO: 3,
    META_SMPTE_OFFSET: 5,
    META_TIME_SIGNATURE: 4,
    META_KEY_SIGNATURE: 2,
}

SYSEX_TYPE_KINDS: Dict[int, EventKind] = {
    STATUS_SYSEX: EventKind.SYSEX_MESSAGE,
    STATUS_ESCAPE: EventKind.ESCAPE_SEQUENCE,
}


def is_status_byte(byte: int) -> bool:
    return byte & 0x80 != 0


def pitch_bend_value(lsb: int, msb: int) -> float:
    """Map a 14-bit pitch wheel position onto [-1.0, 1.0)."""

    raw = (msb << 7) | lsb
    return (raw - PITCH_BEND_CENTER) / PITCH_BEND_CENTER


# ── meta ──────────────────────────────────────────────────────────────


def decode_meta_event(
    meta_type: int, payload: bytes, *, delta_time: int, absolute_time: int
) -> MetaEvent:
    """Classify a meta event from its type byte and payload."""

    timing = dict(delta_time=delta_time, absolute_time=absolute_time)

    text_kind = META_TEXT_KINDS.get(meta_type)
    if text_kind is not None:
        return TextEvent(kind=text_kind, text=payload.decode("latin-1"), **timing)

    expected = META_FIXED_LENGTHS.get(meta_type)
    if expected is not None and len(payload) != expected:
        raise MetaLengthMismatchError(meta_type, expected, len(payload))

    if meta_type == META_CHANNEL_PREFIX:
        return ChannelPrefixEvent(kind=EventKind.CHANNEL_PREFIX, channel=payload[0], **timing)
    if meta_type == META_END_OF_TRACK:
        return EndOfTrackEvent(kind=EventKind.END_OF_TRACK, **timing)
    if meta_type == META_SET_TEMPO:
        return SetTempoEvent(
            kind=EventKind.SET_TEMPO,
            microseconds_per_quarter=int.from_bytes(payload, "big"),
            **timing,
        )
    if meta_type == META_SMPTE_OFFSET:
        hr, mn, se, fr, ff = payload
        return SmpteOffsetEvent(
            kind=EventKind.SMPTE_OFFSET, hr=hr, mn=mn, se=se, fr=fr, ff=ff, **timing
        )
    if meta_type == META_TIME_SIGNATURE:
        nn, dd, cc, bb = payload
        return TimeSignatureEvent(
            kind=EventKind.TIME_SIGNATURE, nn=nn, dd=dd, cc=cc, bb=bb, **timing
        )
    if meta_type == META_KEY_SIGNATURE:
        sf, mi = payload
        return KeySignatureEvent(kind=EventKind.KEY_SIGNATURE, sf=sf, mi=mi, **timing)
    if meta_type == META_SEQUENCER_SPECIFIC:
        return SequencerSpecificEvent(
            kind=EventKind.SEQUENCER_SPECIFIC, data=bytes(payload), **timing
        )
    return UnknownMetaEvent(kind=EventKind.UNKNOWN_META, meta_type=meta_type, **timing)


# ── system exclusive ──────────────────────────────────────────────────


def decode_sysex_event(
    sysex_type: int, payload: bytes, *, delta_time: int, absolute_time: int
) -> SysexEvent:
    kind = SYSEX_TYPE_KINDS.get(sysex_type)
    if kind is None:
        raise UnsupportedSysexTypeError(sysex_type)
    return SysexEvent(
        kind=kind, data=bytes(payload), delta_time=delta_time, absolute_time=absolute_time
    )


# ── channel voice ─────────────────────────────────────────────────────
#
# One decoder per message type, each taking exactly the data bytes that
# type carries: (channel, p1, p2, delta, absolute) or
# (channel, p1, delta, absolute).


def _note_off(channel: int, p1: int, p2: int, delta: int, absolute: int) -> ChannelEvent:
    return NoteEvent(EventKind.NOTE_OFF, delta, absolute, channel, p1, p2)


def _note_on(channel: int, p1: int, p2: int, delta: int, absolute: int) -> ChannelEvent:
    # velocity 0 is the conventional running-status spelling of note-off
    kind = EventKind.NOTE_ON if p2 != 0 else EventKind.NOTE_OFF
    return NoteEvent(kind, delta, absolute, channel, p1, p2)


def _note_aftertouch(channel: int, p1: int, p2: int, delta: int, absolute: int) -> ChannelEvent:
    return NoteAftertouchEvent(EventKind.NOTE_AFTERTOUCH, delta, absolute, channel, p1, p2)


def _controller(channel: int, p1: int, p2: int, delta: int, absolute: int) -> ChannelEvent:
    return ControllerEvent(EventKind.CONTROLLER, delta, absolute, channel, p1, p2)


def _pitch_bend(channel: int, p1: int, p2: int, delta: int, absolute: int) -> ChannelEvent:
    return PitchBendEvent(
        EventKind.PITCH_BEND, delta, absolute, channel, (p2 << 7) | p1, pitch_bend_value(p1, p2)
    )


def _program_change(channel: int, p1: int, delta: int, absolute: int) -> ChannelEvent:
    return ProgramChangeEvent(EventKind.PROGRAM_CHANGE, delta, absolute, channel, p1)


def _channel_aftertouch(channel: int, p1: int, delta: int, absolute: int) -> ChannelEvent:
    return ChannelAftertouchEvent(EventKind.CHANNEL_AFTERTOUCH, delta, absolute, channel, p1)


TWO_BYTE_MESSAGES: Dict[int, Callable[[int, int, int, int, int], ChannelEvent]] = {
    0x8: _note_off,
    0x9: _note_on,
    0xA: _note_aftertouch,
    0xB: _controller,
    0xE: _pitch_bend,
}
ONE_BYTE_MESSAGES: Dict[int, Callable[[int, int, int, int], ChannelEvent]] = {
    0xC: _program_change,
    0xD: _channel_aftertouch,
}


def decode_channel_event(
    status: int, reader: ByteReader, *, delta_time: int, absolute_time: int
) -> ChannelEvent:
    """Read the data bytes for ``status`` from ``reader`` and classify them."""

    midi_type = status >> 4
    channel = status & 0x0F
    p1 = reader.read_u8()

    two_byte = TWO_BYTE_MESSAGES.get(midi_type)
    if two_byte is not None:
        p2 = reader.read_u8()
        return two_byte(channel, p1, p2, delta_time, absolute_time)

    one_byte = ONE_BYTE_MESSAGES.get(midi_type)
    if one_byte is not None:
        return one_byte(channel, p1, delta_time, absolute_time)

    raise InvalidMidiEventTypeError(midi_type, status)


# ── track ─────────────────────────────────────────────────────────────


class TrackDecoder:
    """Decode the events of a single track chunk.

    Holds the per-track state: remembered status byte, absolute tick time
    and the tempo from the most recent set-tempo event.
    """

    def __init__(self, chunk: Chunk):
        if chunk.tag != TRACK_TAG:
            raise InvalidTrackHeaderError(chunk.tag)
        self.chunk = chunk
        self.reader = chunk.reader()
        self.running_status: Optional[int] = None
        self.absolute_time = 0
        self.tempo = 0
        self.events: List[TrackEvent] = []

    @classmethod
    def decode(cls, chunk: Chunk) -> Track:
        decoder = cls(chunk)
        decoder._decode()
        return decoder._track()

    def _decode(self) -> None:
        reader = self.reader
        while not reader.at_end():
            delta = reader.read_vlq()
            self.absolute_time += delta
            status = reader.read_u8()

            if status in SYSEX_TYPE_KINDS:
                event = self._read_sysex(status, delta)
            elif status == STATUS_META:
                event = self._read_meta(delta)
            else:
                event = self._read_channel(status, delta)
            self.events.append(event)

        if reader.consumed != self.chunk.size:
            raise TrackSizeMismatchError(self.chunk.size, reader.consumed)
        logger.debug(
            "decoded %d event(s) over %d tick(s), tempo %d",
            len(self.events),
            self.absolute_time,
            self.tempo,
        )

    def _read_sysex(self, status: int, delta: int) -> SysexEvent:
        length = self.reader.read_vlq()
        payload = self.reader.read_bytes(length)
        return decode_sysex_event(
            status, payload, delta_time=delta, absolute_time=self.absolute_time
        )

    def _read_meta(self, delta: int) -> MetaEvent:
        meta_type = self.reader.read_u8()
        length = self.reader.read_vlq()
        payload = self.reader.read_bytes(length)
        event = decode_meta_event(
            meta_type, payload, delta_time=delta, absolute_time=self.absolute_time
        )
        if event.kind is EventKind.SET_TEMPO:
            self.tempo = event.microseconds_per_quarter
        return event

    def _read_channel(self, status: int, delta: int) -> ChannelEvent:
        if is_status_byte(status):
            self.running_status = status
        else:
            if self.running_status is None:
                raise RunningStatusUninitializedError(self.reader.tell() - 1, status)
            self.reader.rewind(1)
            status = self.running_status
        return decode_channel_event(
            status, self.reader, delta_time=delta, absolute_time=self.absolute_time
        )

    def _track(self) -> Track:
        return Track(
            tag=self.chunk.tag,
            size=self.chunk.size,
            ticks_duration=self.absolute_time,
            tempo=self.tempo,
            events=tuple(self.events),
        )


def decode_track(chunk: Chunk) -> Track:
    return TrackDecoder.decode(chunk)


__all__ = [
    "META_FIXED_LENGTHS",
    "META_TEXT_KINDS",
    "TrackDecoder",
    "decode_channel_event",
    "decode_meta_event",
    "decode_sysex_event",
    "decode_track",
    "is_status_byte",
    "pitch_bend_value",
]
