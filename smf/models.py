"""Decoded SMF file, header and track records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from .events import MICROSECONDS_PER_MINUTE, EventKind, TrackEvent

HEADER_TAG = "MThd"
TRACK_TAG = "MTrk"


@dataclass(frozen=True)
class TimeDivision:
    """Interpretation of the header's 16-bit division word.

    Bit 15 clear: ``ticks_per_quarter`` in the low 15 bits.
    Bit 15 set: SMPTE timing; the high byte is the negated frame rate
    (-24, -25, -29 or -30) and the low byte the ticks per frame.
    """

    raw: int
    ticks_per_quarter: Optional[int] = None
    frames_per_second: Optional[int] = None
    ticks_per_frame: Optional[int] = None

    @classmethod
    def from_word(cls, word: int) -> "TimeDivision":
        if word & 0x8000:
            high = (word >> 8) & 0xFF
            return cls(
                raw=word,
                frames_per_second=0x100 - high,
                ticks_per_frame=word & 0xFF,
            )
        return cls(raw=word, ticks_per_quarter=word & 0x7FFF)

    @property
    def is_smpte(self) -> bool:
        return self.frames_per_second is not None


@dataclass(frozen=True)
class MidiHeader:
    tag: str
    size: int
    format_type: int
    track_count: int  # as declared; not checked against the chunks present
    time_division: int

    @property
    def division(self) -> TimeDivision:
        return TimeDivision.from_word(self.time_division)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "size": self.size,
            "format_type": self.format_type,
            "track_count": self.track_count,
            "time_division": self.time_division,
        }


@dataclass(frozen=True)
class Track:
    tag: str
    size: int
    ticks_duration: int  # sum of all delta-times
    tempo: int  # us per quarter from the last set-tempo event, 0 if none
    events: Tuple[TrackEvent, ...]

    def __iter__(self) -> Iterator[TrackEvent]:
        return iter(self.events)

    @property
    def bpm(self) -> Optional[float]:
        if self.tempo == 0:
            return None
        return MICROSECONDS_PER_MINUTE / self.tempo

    def events_of(self, *kinds: EventKind) -> Tuple[TrackEvent, ...]:
        wanted = frozenset(kinds)
        return tuple(event for event in self.events if event.kind in wanted)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "size": self.size,
            "ticks_duration": self.ticks_duration,
            "tempo": self.tempo,
            "events": [event.to_dict() for event in self.events],
        }


@dataclass(frozen=True)
class MidiFileData:
    header: MidiHeader
    tracks: Tuple[Track, ...]

    @classmethod
    def from_bytes(cls, data: bytes) -> "MidiFileData":
        from .midifile import parse_midi

        return parse_midi(data)

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "tracks": [track.to_dict() for track in self.tracks],
        }


__all__ = [
    "HEADER_TAG",
    "MidiFileData",
    "MidiHeader",
    "TRACK_TAG",
    "TimeDivision",
    "Track",
]
