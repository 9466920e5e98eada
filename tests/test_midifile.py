"""End-to-end tests for parse_midi."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import json
from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf import (  # noqa: E402
    EventKind,
    InvalidFileHeaderError,
    InvalidTrackHeaderError,
    MidiFileData,
    OutOfBoundsError,
    SMFError,
    TimeDivision,
    parse_midi,
)

from smf_builders import (  # noqa: E402
    END_OF_TRACK,
    chunk,
    event,
    header,
    meta,
    midi_file,
    sysex,
    track,
)

TEMPO_TRACK = track(
    event(0, meta(0x51, b"\x07\xa1\x20")),
    END_OF_TRACK,
)


def test_tempo_only_file() -> None:
    data = midi_file(TEMPO_TRACK, format_type=0, division=96)
    midi = parse_midi(data)

    assert midi.header.tag == "MThd"
    assert midi.header.size == 6
    assert midi.header.format_type == 0
    assert midi.header.track_count == 1
    assert midi.header.time_division == 96

    assert midi.track_count == 1
    only = midi.tracks[0]
    assert only.tag == "MTrk"
    assert only.size == 11
    assert only.tempo == 500000
    assert only.ticks_duration == 0
    assert [e.kind for e in only.events] == [EventKind.SET_TEMPO, EventKind.END_OF_TRACK]


def test_bad_file_tag() -> None:
    data = chunk(b"XYZZ", b"\x00\x00\x00\x01\x00\x60") + TEMPO_TRACK
    with pytest.raises(InvalidFileHeaderError, match="'XYZZ'") as excinfo:
        parse_midi(data)
    assert excinfo.value.tag == "XYZZ"


def test_bad_file_tag_is_an_smf_error_and_value_error() -> None:
    with pytest.raises(SMFError):
        parse_midi(b"RIFF\x00\x00\x00\x00")
    with pytest.raises(ValueError):
        parse_midi(b"RIFF\x00\x00\x00\x00")


def test_bad_track_tag() -> None:
    data = header() + chunk(b"MTrx", b"")
    with pytest.raises(InvalidTrackHeaderError):
        parse_midi(data)


@pytest.mark.parametrize(
    "data",
    [
        pytest.param(b"XYZZ\x00\x01\x00\x00" + b"\x00" * 16, id="length-past-end"),
        pytest.param(b"RIFF\x24\x08\x00\x00WAVEfmt \x10\x00\x00\x00", id="riff-wave"),
        pytest.param(b"\x89PNG\r\n\x1a\n\x00\x00\x00\x0dIHDR", id="png"),
    ],
)
def test_foreign_file_is_rejected_by_its_tag(data: bytes) -> None:
    with pytest.raises(InvalidFileHeaderError) as excinfo:
        parse_midi(data)
    assert excinfo.value.tag == data[:4].decode("latin-1")


def test_bad_track_tag_with_length_past_end() -> None:
    data = header() + b"JUNK" + (0x1000).to_bytes(4, "big") + b"\x00\x00\x00\x00"
    with pytest.raises(InvalidTrackHeaderError, match="'JUNK'") as excinfo:
        parse_midi(data)
    assert excinfo.value.tag == "JUNK"


@pytest.mark.parametrize(
    "data",
    [
        pytest.param(b"", id="empty"),
        pytest.param(b"MThd\x00\x00", id="truncated-length"),
        pytest.param(b"MThd\x00\x00\x00\x06\x00\x00\x00", id="truncated-payload"),
        pytest.param(chunk(b"MThd", b"\x00\x00"), id="header-too-short"),
        pytest.param(header() + b"MTrk\x00\x00\x00\x08\x00\xff", id="truncated-track"),
    ],
)
def test_truncated_input(data: bytes) -> None:
    with pytest.raises(OutOfBoundsError):
        parse_midi(data)


def test_header_without_tracks() -> None:
    midi = parse_midi(header(track_count=0))
    assert midi.tracks == ()


def test_longer_header_payload_is_tolerated() -> None:
    data = chunk(b"MThd", b"\x00\x01\x00\x01\x01\xe0" + b"\x00\x00") + TEMPO_TRACK
    midi = parse_midi(data)
    assert midi.header.size == 8
    assert midi.header.time_division == 480
    assert midi.track_count == 1


def test_declared_track_count_is_not_enforced() -> None:
    notes = track(event(0, b"\x90\x3c\x40"), event(96, b"\x3c\x00"), END_OF_TRACK)
    data = header(format_type=1, track_count=5) + TEMPO_TRACK + notes
    midi = parse_midi(data)
    assert midi.header.track_count == 5
    assert midi.track_count == 2


def test_multi_track_timing_is_independent() -> None:
    first = track(event(10, b"\x90\x3c\x40"), event(20, b"\x3c\x00"), END_OF_TRACK)
    second = track(
        event(0, meta(0x03, b"Bass")),
        event(5, b"\x91\x24\x50"),
        event(7, sysex(0xF0, b"\x7e\x7f\x09\x01\xf7")),
        event(100, b"\x81\x24\x00"),
        END_OF_TRACK,
    )
    midi = parse_midi(midi_file(first, second, format_type=1))

    assert [t.ticks_duration for t in midi.tracks] == [30, 112]
    for t in midi.tracks:
        running = 0
        for e in t.events:
            running += e.delta_time
            assert e.absolute_time == running
        assert sum(e.delta_time for e in t.events) == t.ticks_duration

    names = midi.tracks[1].events_of(EventKind.SEQUENCE)
    assert names[0].text == "Bass"


def test_running_status_does_not_cross_tracks() -> None:
    first = track(event(0, b"\x90\x3c\x40"))
    second = track(event(0, b"\x3c\x00"))
    with pytest.raises(SMFError, match="no status byte"):
        parse_midi(midi_file(first, second, format_type=1))


def test_trailing_bytes_are_read_as_another_chunk() -> None:
    data = midi_file(TEMPO_TRACK) + b"\x00\x00"
    with pytest.raises(OutOfBoundsError):
        parse_midi(data)


@pytest.mark.parametrize("wrap", [bytes, bytearray, memoryview], ids=lambda f: f.__name__)
def test_accepts_bytes_like(wrap) -> None:
    midi = parse_midi(wrap(midi_file(TEMPO_TRACK)))
    assert midi.tracks[0].tempo == 500000


def test_from_bytes_matches_parse_midi() -> None:
    data = midi_file(TEMPO_TRACK)
    assert MidiFileData.from_bytes(data) == parse_midi(data)


def test_parses_are_independent_across_threads() -> None:
    inputs = [
        midi_file(track(event(n, b"\x90\x3c\x40"), END_OF_TRACK)) for n in range(32)
    ]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(parse_midi, inputs))
    assert [r.tracks[0].ticks_duration for r in results] == list(range(32))


def test_to_dict_is_json_serialisable() -> None:
    notes = track(
        event(0, meta(0x7F, b"\x00\x20")),
        event(0, b"\xe0\x00\x40"),
        END_OF_TRACK,
    )
    doc = parse_midi(midi_file(TEMPO_TRACK, notes, format_type=1)).to_dict()
    round_tripped = json.loads(json.dumps(doc))

    assert round_tripped["header"]["format_type"] == 1
    assert round_tripped["tracks"][0]["tempo"] == 500000
    events = round_tripped["tracks"][1]["events"]
    assert events[0] == {
        "kind": "sequencerSpecific",
        "delta_time": 0,
        "absolute_time": 0,
        "data": [0x00, 0x20],
    }
    assert events[1]["kind"] == "pitchBend"
    assert events[1]["value"] == 0.0


class TestTimeDivision:
    def test_ticks_per_quarter(self):
        division = TimeDivision.from_word(480)
        assert division.ticks_per_quarter == 480
        assert not division.is_smpte

    @pytest.mark.parametrize(
        "word, fps, ticks",
        [
            pytest.param(0xE828, 24, 40, id="24fps"),
            pytest.param(0xE704, 25, 4, id="25fps"),
            pytest.param(0xE350, 29, 80, id="29.97fps"),
            pytest.param(0xE250, 30, 80, id="30fps"),
        ],
    )
    def test_smpte(self, word, fps, ticks):
        division = TimeDivision.from_word(word)
        assert division.is_smpte
        assert division.frames_per_second == fps
        assert division.ticks_per_frame == ticks
        assert division.ticks_per_quarter is None

    def test_header_property(self):
        midi = parse_midi(midi_file(TEMPO_TRACK, division=0xE728))
        assert midi.header.division.frames_per_second == 25
