"""Exceptions raised while decoding Standard MIDI Files.

Every decode failure is fatal to the current parse.  All errors derive from
:class:`SMFError`, itself a ``ValueError``, so callers can catch either the
precise kind or the whole family.
"""

from __future__ import annotations


class SMFError(ValueError):
    """Base class for all decode failures."""


class InvalidFileHeaderError(SMFError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"not a MIDI file: header chunk tag is {tag!r}, expected 'MThd'")


class InvalidTrackHeaderError(SMFError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"invalid track chunk tag {tag!r}, expected 'MTrk'")


class OutOfBoundsError(SMFError):
    def __init__(self, offset: int, requested: int, available: int) -> None:
        self.offset = offset
        self.requested = requested
        self.available = available
        super().__init__(
            f"read of {requested} byte(s) at offset {offset} exceeds buffer "
            f"({available} byte(s) available)"
        )


class VLQOverflowError(SMFError):
    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(
            f"variable-length quantity starting at offset {offset} exceeds 32 bits"
        )


class RunningStatusUninitializedError(SMFError):
    def __init__(self, offset: int, byte: int) -> None:
        self.offset = offset
        self.byte = byte
        super().__init__(
            f"data byte 0x{byte:02X} at offset {offset} relies on running status, "
            "but no status byte has been seen in this track"
        )


class InvalidMidiEventTypeError(SMFError):
    def __init__(self, midi_type: int, status: int) -> None:
        self.midi_type = midi_type
        self.status = status
        super().__init__(
            f"invalid MIDI event type 0x{midi_type:X} (status byte 0x{status:02X})"
        )


class UnsupportedSysexTypeError(SMFError):
    def __init__(self, sysex_type: int) -> None:
        self.sysex_type = sysex_type
        super().__init__(f"unsupported system exclusive type 0x{sysex_type:02X}")


class MetaLengthMismatchError(SMFError):
    def __init__(self, meta_type: int, expected: int, actual: int) -> None:
        self.meta_type = meta_type
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"meta event 0x{meta_type:02X} has length {actual}, expected {expected}"
        )


class TrackSizeMismatchError(SMFError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"track declares {expected} byte(s) but decoding consumed {actual}"
        )


__all__ = [
    "InvalidFileHeaderError",
    "InvalidMidiEventTypeError",
    "InvalidTrackHeaderError",
    "MetaLengthMismatchError",
    "OutOfBoundsError",
    "RunningStatusUninitializedError",
    "SMFError",
    "TrackSizeMismatchError",
    "UnsupportedSysexTypeError",
    "VLQOverflowError",
]
