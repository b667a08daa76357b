"""Persisted document shape: building, sanitizing, and reading payloads."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from tabscribe.config import EditorConfig
from tabscribe.tab_models import STRING_COUNT, STRING_LABELS, StringTrack, TabDocument
from tabscribe.techniques import TechniqueCode
from tabscribe.tokens import EMPTY_TEXT, NoteToken, decode_token

logger = logging.getLogger(__name__)


@dataclass
class LoadedState:
    """Editing state restored from a persisted payload."""

    document: TabDocument
    current_position: int = 0
    technique: TechniqueCode = TechniqueCode.NORMAL


def document_to_payload(
    document: TabDocument,
    current_position: int = 0,
    technique: TechniqueCode = TechniqueCode.NORMAL,
) -> dict[str, Any]:
    """
    Build the persisted payload for a document and its cursor state.

    Chord and note arrays are dense up to their highest written position,
    filled with ``""`` and ``"-"`` respectively.
    """
    chord_count = max(document.chords, default=-1) + 1
    chords = [document.chord_at(position) for position in range(chord_count)]

    lines = []
    for track in document.strings:
        note_count = track.last_position() + 1
        lines.append(
            {
                "string": track.label,
                "notes": [track.note_at(position).text for position in range(note_count)],
            }
        )

    return {
        "tab": {"chords": chords, "lines": lines},
        "currentPosition": current_position,
        "selectedTechnique": technique.value,
        "tabLength": document.length,
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _sanitize_length(raw: Any, default: int) -> int:
    if _is_int(raw) and raw >= 0:
        return int(raw)
    if raw is not None:
        logger.warning("Invalid tabLength %r; using default %d.", raw, default)
    return default


def _sanitize_notes(raw_notes: Any, label: str) -> dict[int, NoteToken]:
    if not isinstance(raw_notes, list):
        if raw_notes is not None:
            logger.warning("String '%s' notes are not a list; treating as empty.", label)
        return {}

    notes: dict[int, NoteToken] = {}
    for position, raw in enumerate(raw_notes):
        if raw is None:
            continue
        token = decode_token(str(raw)) if isinstance(raw, str) or _is_int(raw) else None
        if token is None:
            logger.warning(
                "Unreadable token %r on string '%s' at position %d; using '%s'.",
                raw,
                label,
                position,
                EMPTY_TEXT,
            )
            continue
        if not token.is_empty:
            notes[position] = token
    return notes


def _sanitize_strings(raw_lines: Any) -> list[StringTrack]:
    if not isinstance(raw_lines, list):
        raw_lines = []
    if len(raw_lines) != STRING_COUNT:
        logger.warning(
            "Expected %d string lines, found %d; normalizing.", STRING_COUNT, len(raw_lines)
        )

    tracks: list[StringTrack] = []
    for index, default_label in enumerate(STRING_LABELS):
        raw_line = raw_lines[index] if index < len(raw_lines) else None
        if not isinstance(raw_line, dict):
            tracks.append(StringTrack(label=default_label))
            continue

        label = raw_line.get("string")
        if not isinstance(label, str) or not label.strip():
            label = default_label
        notes = _sanitize_notes(raw_line.get("notes"), label)
        tracks.append(StringTrack(label=label, notes=notes))
    return tracks


def _sanitize_chords(raw_chords: Any) -> dict[int, str]:
    if not isinstance(raw_chords, list):
        return {}
    chords: dict[int, str] = {}
    for position, label in enumerate(raw_chords):
        if isinstance(label, str):
            if label.strip():
                chords[position] = label
        elif label is not None:
            logger.warning("Ignoring non-text chord %r at position %d.", label, position)
    return chords


def payload_to_state(payload: Any, config: EditorConfig | None = None) -> LoadedState:
    """
    Restore editing state from a persisted payload, sanitizing as it goes.

    Never raises: a payload that is not a mapping yields an empty document,
    missing or malformed fields fall back to defaults, the string list is
    normalized to six tracks, and unreadable tokens become empty cells.
    Cells stored past ``tabLength`` are kept.
    """
    config = config or EditorConfig()
    if not isinstance(payload, dict):
        logger.warning("Document payload is not a mapping; starting from an empty tab.")
        return LoadedState(document=TabDocument.empty(config.default_length))

    tab = payload.get("tab")
    if not isinstance(tab, dict):
        tab = {}

    document = TabDocument(
        length=_sanitize_length(payload.get("tabLength"), config.default_length),
        chords=_sanitize_chords(tab.get("chords")),
        strings=_sanitize_strings(tab.get("lines")),
    )

    raw_position = payload.get("currentPosition")
    position = int(raw_position) if _is_int(raw_position) else 0
    position = max(0, min(max(document.length - 1, 0), position))

    raw_technique = payload.get("selectedTechnique", TechniqueCode.NORMAL.value)
    technique = TechniqueCode.parse(raw_technique) if isinstance(raw_technique, str) else None
    if technique is None:
        logger.warning("Unknown technique %r; using normal.", raw_technique)
        technique = TechniqueCode.NORMAL

    return LoadedState(document=document, current_position=position, technique=technique)


def load_payload_file(path: str) -> Any:
    """
    Read a persisted payload from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON.
        OSError: If the file cannot be read.
    """
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def save_payload_file(payload: dict[str, Any], path: str) -> None:
    """
    Write a persisted payload to a JSON file.

    Raises:
        OSError: If the file cannot be written.
    """
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
        fh.write("\n")
