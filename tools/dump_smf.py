#!/usr/bin/env python3
"""Decode Standard MIDI Files and print what was found.

Examples
--------
Per-track summary:
    python tools/dump_smf.py song.mid

Every event, one per line:
    python tools/dump_smf.py song.mid --events

Full structure as JSON:
    python tools/dump_smf.py "midi/**/*.mid" --json
"""

from __future__ import annotations

import argparse
import glob
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from smf import MidiFileData, SMFError, TrackEvent, parse_midi  # noqa: E402

logger = logging.getLogger("dump_smf")


def collect_paths(patterns: Iterable[str]) -> List[Path]:
    """Expand globs in order, keeping a pattern that matches nothing as a
    literal path if it exists.  A file reached twice is listed once."""
    found: Dict[Path, Path] = {}
    for pattern in patterns:
        for path in sorted(Path(p) for p in glob.glob(pattern, recursive=True)) or [
            Path(pattern)
        ]:
            if path.exists():
                found.setdefault(path.resolve(), path)
    return list(found.values())


def describe_event(event: TrackEvent) -> str:
    fields = event.to_dict()
    for key in ("kind", "delta_time", "absolute_time"):
        fields.pop(key)
    detail = " ".join(f"{key}={value}" for key, value in fields.items())
    return f"{event.absolute_time:>8} {event.kind.value:<18} {detail}".rstrip()


def summarize(path: Path, midi: MidiFileData, *, show_events: bool) -> List[str]:
    header = midi.header
    division = header.division
    if division.is_smpte:
        timing = f"{division.frames_per_second} fps x {division.ticks_per_frame} ticks"
    else:
        timing = f"{division.ticks_per_quarter} ticks/quarter"
    lines = [
        f"{path}: format {header.format_type}, "
        f"{midi.track_count} track(s) (header says {header.track_count}), {timing}"
    ]
    for index, track in enumerate(midi.tracks):
        bpm = f"{track.bpm:.2f} bpm" if track.bpm is not None else "no tempo"
        lines.append(
            f"  track {index}: {len(track.events)} event(s), "
            f"{track.ticks_duration} tick(s), {bpm}"
        )
        if show_events:
            lines.extend(f"    {describe_event(event)}" for event in track)
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Decode Standard MIDI Files and print their structure."
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="File paths or glob patterns (quotes recommended for wildcards).",
    )
    parser.add_argument("--events", action="store_true", help="List every event.")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text.")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log decoder progress to stderr."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    targets = collect_paths(args.paths)
    if not targets:
        parser.error("No files matched the provided paths/patterns.")

    failures = 0
    documents = []
    for path in targets:
        try:
            midi = parse_midi(path.read_bytes())
        except SMFError as err:
            failures += 1
            logger.error("%s: %s", path, err)
            continue

        if args.json:
            documents.append({"path": str(path), **midi.to_dict()})
        else:
            print("\n".join(summarize(path, midi, show_events=args.events)))

    if args.json:
        print(json.dumps(documents, indent=2))
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
