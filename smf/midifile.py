"""Top-level SMF parsing: header chunk, then track chunks to end of buffer."""

from __future__ import annotations

import logging
from typing import List

from .decoder import decode_track
from .errors import InvalidFileHeaderError
from .models import HEADER_TAG, TRACK_TAG, MidiFileData, MidiHeader, Track
from .reader import ByteReader, BytesLike, Chunk

logger = logging.getLogger(__name__)


def read_header(chunk: Chunk) -> MidiHeader:
    """Interpret an ``MThd`` chunk.

    Only the first six payload bytes are defined (format, track count,
    division); anything beyond is ignored.
    """

    if chunk.tag != HEADER_TAG:
        raise InvalidFileHeaderError(chunk.tag)
    reader = chunk.reader()
    format_type = reader.read_u16()
    track_count = reader.read_u16()
    time_division = reader.read_u16()
    return MidiHeader(
        tag=chunk.tag,
        size=chunk.size,
        format_type=format_type,
        track_count=track_count,
        time_division=time_division,
    )


def parse_midi(data: BytesLike) -> MidiFileData:
    """Decode a complete Standard MIDI File held in memory.

    Parameters
    ----------
    data : bytes-like
        The whole file.  It is never modified.

    Returns
    -------
    MidiFileData
        Header and every track chunk found before the end of the buffer.
        The header's declared track count is reported as-is and is not
        required to match the number of tracks decoded.

    Raises
    ------
    SMFError
        On the first malformed structure encountered; no partial result is
        returned.
    """
    reader = ByteReader(data)
    header = read_header(reader.read_chunk(HEADER_TAG))
    logger.debug(
        "header: format %d, %d declared track(s), division 0x%04X",
        header.format_type,
        header.track_count,
        header.time_division,
    )

    tracks: List[Track] = []
    while not reader.at_end():
        chunk = reader.read_chunk(TRACK_TAG)
        logger.debug("decoding track %d (%d bytes)", len(tracks), chunk.size)
        tracks.append(decode_track(chunk))

    if len(tracks) != header.track_count:
        logger.debug(
            "header declares %d track(s), found %d", header.track_count, len(tracks)
        )
    return MidiFileData(header=header, tracks=tuple(tracks))


__all__ = ["parse_midi", "read_header"]
