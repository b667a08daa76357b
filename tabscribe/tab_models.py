"""Data models for the tablature grid."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from tabscribe.tokens import NoteToken

#: Display labels of the six strings, high pitch to low pitch.
STRING_LABELS: Final[tuple[str, ...]] = ("e", "B", "G", "D", "A", "E")
STRING_COUNT: Final[int] = len(STRING_LABELS)


@dataclass
class StringTrack:
    """One string's sparse note sequence, keyed by position."""

    label: str
    notes: dict[int, NoteToken] = field(default_factory=dict)

    def note_at(self, position: int) -> NoteToken:
        return self.notes.get(position, NoteToken.empty())

    def last_position(self) -> int:
        """Highest written position, or -1 when the track is empty."""
        return max(self.notes, default=-1)


def _default_strings() -> list[StringTrack]:
    return [StringTrack(label=label) for label in STRING_LABELS]


@dataclass
class TabDocument:
    """
    A guitar tab: six string tracks over ``length`` addressable positions.

    Every mutating operation is total. Unknown string indices and
    positions outside ``[0, length)`` are ignored rather than raised.

    Attributes:
        length:  Number of addressable positions; grows only via ``extend``.
        chords:  Sparse chord labels keyed by position.
        strings: The six string tracks, high to low pitch.
    """

    length: int = 0
    chords: dict[int, str] = field(default_factory=dict)
    strings: list[StringTrack] = field(default_factory=_default_strings)

    @classmethod
    def empty(cls, length: int) -> TabDocument:
        return cls(length=max(0, length))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _addressable(self, position: int) -> bool:
        return 0 <= position < self.length

    def _has_string(self, string_index: int) -> bool:
        return 0 <= string_index < len(self.strings)

    def note_at(self, string_index: int, position: int) -> NoteToken:
        if not self._has_string(string_index):
            return NoteToken.empty()
        return self.strings[string_index].note_at(position)

    def chord_at(self, position: int) -> str:
        return self.chords.get(position, "")

    def max_observed_length(self) -> int:
        """Nominal length, widened to cover any cell written past it."""
        last_note = max((track.last_position() for track in self.strings), default=-1)
        last_chord = max(self.chords, default=-1)
        return max(self.length, last_note + 1, last_chord + 1)

    def copy(self) -> TabDocument:
        return TabDocument(
            length=self.length,
            chords=dict(self.chords),
            strings=[StringTrack(label=t.label, notes=dict(t.notes)) for t in self.strings],
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    # Each mutator returns True when the document actually changed.

    def set_note(self, string_index: int, position: int, token: NoteToken) -> bool:
        if not (self._has_string(string_index) and self._addressable(position)):
            return False
        notes = self.strings[string_index].notes
        if token.is_empty:
            return notes.pop(position, None) is not None
        if notes.get(position) == token:
            return False
        notes[position] = token
        return True

    def clear_cell(self, string_index: int, position: int) -> bool:
        if not self._has_string(string_index):
            return False
        return self.strings[string_index].notes.pop(position, None) is not None

    def set_chord(self, position: int, label: str) -> bool:
        if not self._addressable(position):
            return False
        if not label.strip():
            return self.clear_chord(position)
        if self.chords.get(position) == label:
            return False
        self.chords[position] = label
        return True

    def clear_chord(self, position: int) -> bool:
        return self.chords.pop(position, None) is not None

    def clear_position(self, position: int) -> bool:
        changed = self.clear_chord(position)
        for track in self.strings:
            changed = track.notes.pop(position, None) is not None or changed
        return changed

    def clear_all(self) -> bool:
        changed = bool(self.chords) or any(track.notes for track in self.strings)
        self.chords.clear()
        for track in self.strings:
            track.notes.clear()
        return changed

    def extend(self, amount: int) -> bool:
        if amount <= 0:
            return False
        self.length += amount
        return True
