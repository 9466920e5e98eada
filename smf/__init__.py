"""Decoder for Standard MIDI Files (SMF)."""

from .errors import (  # noqa: F401
    InvalidFileHeaderError,
    InvalidMidiEventTypeError,
    InvalidTrackHeaderError,
    MetaLengthMismatchError,
    OutOfBoundsError,
    RunningStatusUninitializedError,
    SMFError,
    TrackSizeMismatchError,
    UnsupportedSysexTypeError,
    VLQOverflowError,
)
from .events import (  # noqa: F401
    ChannelAftertouchEvent,
    ChannelPrefixEvent,
    ControllerEvent,
    EndOfTrackEvent,
    EventKind,
    KeySignatureEvent,
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
from .models import (  # noqa: F401
    MidiFileData,
    MidiHeader,
    TimeDivision,
    Track,
)
from .reader import ByteReader, Chunk  # noqa: F401
from .decoder import (  # noqa: F401
    TrackDecoder,
    decode_channel_event,
    decode_meta_event,
    decode_sysex_event,
    decode_track,
    pitch_bend_value,
)
from .midifile import parse_midi, read_header  # noqa: F401
