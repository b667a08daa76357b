"""TechniqueResolver: turns a placed note plus a technique into cell writes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from tabscribe.tokens import COMPOSITE_SYMBOLS, NoteToken, TokenKind


class TechniqueCode(Enum):
    """Playing techniques selectable in the editor (values are persisted)."""

    NORMAL = "normal"
    MUTE = "mute"
    HARMONIC = "harmonic"
    BEND = "bend"
    RELEASE = "release"
    VIBRATO = "vibrato"
    SLIDE_UP = "slideUp"
    SLIDE_DOWN = "slideDown"
    HAMMER_ON = "hammerOn"
    PULL_OFF = "pullOff"

    @classmethod
    def parse(cls, value: TechniqueCode | str) -> TechniqueCode | None:
        """Return the code for ``value``, or ``None`` when it is unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class TechniqueSpec:
    """
    One row of the technique table.

    Attributes:
        symbol: Notation symbol shown in the legend.
        arity:  1 for single-note techniques, 2 for techniques linking two notes.
        label:  Human-readable name.
        kind:   Token kind the technique produces.
    """

    symbol: str
    arity: int
    label: str
    kind: TokenKind


# ── Technique table ─────────────────────────────────────────────────────────

TECHNIQUES: Final[dict[TechniqueCode, TechniqueSpec]] = {
    TechniqueCode.NORMAL: TechniqueSpec("", 1, "Normal", TokenKind.FRETTED),
    TechniqueCode.SLIDE_UP: TechniqueSpec(
        COMPOSITE_SYMBOLS[TokenKind.SLIDE_UP], 2, "Slide Up", TokenKind.SLIDE_UP
    ),
    TechniqueCode.SLIDE_DOWN: TechniqueSpec(
        COMPOSITE_SYMBOLS[TokenKind.SLIDE_DOWN], 2, "Slide Down", TokenKind.SLIDE_DOWN
    ),
    TechniqueCode.HAMMER_ON: TechniqueSpec(
        COMPOSITE_SYMBOLS[TokenKind.HAMMER_ON], 2, "Hammer-On", TokenKind.HAMMER_ON
    ),
    TechniqueCode.PULL_OFF: TechniqueSpec(
        COMPOSITE_SYMBOLS[TokenKind.PULL_OFF], 2, "Pull-Off", TokenKind.PULL_OFF
    ),
    TechniqueCode.BEND: TechniqueSpec("^", 1, "Bend", TokenKind.BEND),
    TechniqueCode.RELEASE: TechniqueSpec("r", 1, "Release", TokenKind.RELEASE),
    TechniqueCode.VIBRATO: TechniqueSpec("~", 1, "Vibrato", TokenKind.VIBRATO),
    TechniqueCode.MUTE: TechniqueSpec("x", 1, "Mute", TokenKind.MUTED),
    TechniqueCode.HARMONIC: TechniqueSpec("<>", 1, "Harmonic", TokenKind.HARMONIC),
}


def technique_legend(
    kinds: Iterable[TokenKind] | None = None,
) -> list[tuple[TechniqueCode, TechniqueSpec]]:
    """
    Rows of the technique table worth explaining in a legend.

    Plain notes are left out. When ``kinds`` is given, only techniques
    producing one of those token kinds are listed, in table order.
    """
    wanted = None if kinds is None else set(kinds)
    return [
        (code, spec)
        for code, spec in TECHNIQUES.items()
        if code is not TechniqueCode.NORMAL and (wanted is None or spec.kind in wanted)
    ]


def single_note_token(technique: TechniqueCode, fret: int) -> NoteToken:
    """Token written for an arity-1 technique (or the provisional note of an arity-2 one)."""
    kind = TECHNIQUES[technique].kind
    if kind is TokenKind.MUTED:
        return NoteToken.muted()
    if kind is TokenKind.HARMONIC:
        return NoteToken.harmonic(fret)
    if kind is TokenKind.BEND:
        return NoteToken.bend(fret)
    if kind is TokenKind.RELEASE:
        return NoteToken.release(fret)
    if kind is TokenKind.VIBRATO:
        return NoteToken.vibrato(fret)
    return NoteToken.fretted(fret)


@dataclass(frozen=True)
class PendingTechnique:
    """A two-note technique waiting for its target note."""

    string_index: int
    origin_position: int
    origin_fret: int
    technique: TechniqueCode


@dataclass(frozen=True)
class CellWrite:
    string_index: int
    position: int
    token: NoteToken


@dataclass(frozen=True)
class Placement:
    """
    Outcome of one resolved note placement.

    Attributes:
        writes:  Cell writes to apply, in order.
        advance: Whether the cursor should move one position forward.
        aborted: True when a pending technique was discarded by this call.
    """

    writes: list[CellWrite] = field(default_factory=list)
    advance: bool = False
    aborted: bool = False


class TechniqueResolver:
    """
    Two-state machine (Idle / AwaitingTarget) for technique placement.

    Single-note techniques resolve immediately. Two-note techniques
    (slides, hammer-ons, pull-offs) first write a provisional fret and
    remember the origin; the next placement on the same string completes
    the link by rewriting the origin cell as a composite token. A
    placement on a different string discards the pending link and
    writes nothing.
    """

    def __init__(self) -> None:
        self._pending: PendingTechnique | None = None

    @property
    def pending(self) -> PendingTechnique | None:
        return self._pending

    @property
    def is_awaiting_target(self) -> bool:
        return self._pending is not None

    def cancel(self) -> None:
        self._pending = None

    def resolve(
        self,
        string_index: int,
        fret: int,
        position: int,
        technique: TechniqueCode,
    ) -> Placement:
        """
        Resolve one placed note.

        Args:
            string_index: String the note was placed on.
            fret:         Fret number, already clamped by the caller.
            position:     Current cursor position.
            technique:    Technique selected when idle.

        Returns:
            The cell writes to apply and whether the cursor advances.
        """
        if self._pending is not None:
            pending, self._pending = self._pending, None
            return self._complete(pending, string_index, fret, position)

        spec = TECHNIQUES[technique]
        provisional = single_note_token(technique, fret)
        if spec.arity == 2:
            self._pending = PendingTechnique(
                string_index=string_index,
                origin_position=position,
                origin_fret=fret,
                technique=technique,
            )
        return Placement(writes=[CellWrite(string_index, position, provisional)], advance=True)

    def _complete(
        self, pending: PendingTechnique, string_index: int, fret: int, position: int
    ) -> Placement:
        if string_index != pending.string_index:
            return Placement(aborted=True)

        kind = TECHNIQUES[pending.technique].kind
        writes = [
            CellWrite(
                pending.string_index,
                pending.origin_position,
                NoteToken.composite(kind, pending.origin_fret, fret),
            )
        ]
        # Cursor pinned on the origin column: keep the composite visible.
        if position != pending.origin_position:
            writes.append(CellWrite(string_index, position, NoteToken.fretted(fret)))
        return Placement(writes=writes, advance=True)
