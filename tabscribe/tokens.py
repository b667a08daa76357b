"""NoteToken codec: the grammar of a single tab cell."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

# ── Fret range ──────────────────────────────────────────────────────────────
MIN_FRET: Final[int] = 0  # open string
MAX_FRET: Final[int] = 22

EMPTY_TEXT: Final[str] = "-"


class TokenKind(Enum):
    EMPTY = "empty"
    FRETTED = "fretted"
    MUTED = "muted"
    HARMONIC = "harmonic"
    BEND = "bend"
    RELEASE = "release"
    VIBRATO = "vibrato"
    SLIDE_UP = "slide-up"
    SLIDE_DOWN = "slide-down"
    HAMMER_ON = "hammer-on"
    PULL_OFF = "pull-off"


#: Symbol written between the two frets of a composite token.
COMPOSITE_SYMBOLS: Final[dict[TokenKind, str]] = {
    TokenKind.SLIDE_UP: "/",
    TokenKind.SLIDE_DOWN: "\\",
    TokenKind.HAMMER_ON: "h",
    TokenKind.PULL_OFF: "p",
}

_SYMBOL_TO_COMPOSITE: Final[dict[str, TokenKind]] = {
    symbol: kind for kind, symbol in COMPOSITE_SYMBOLS.items()
}

#: Suffix appended to the fret for single-fret ornament tokens.
ORNAMENT_SUFFIXES: Final[dict[TokenKind, str]] = {
    TokenKind.BEND: "^",
    TokenKind.RELEASE: "^r",
    TokenKind.VIBRATO: "~",
}

_FRETTED_RE = re.compile(r"^(\d{1,2})$")
_HARMONIC_RE = re.compile(r"^<(\d{1,2})>$")
_ORNAMENT_RE = re.compile(r"^(\d{1,2})(\^r|\^|~)$")
_COMPOSITE_RE = re.compile(r"^(\d{1,2})([/\\hp])(\d{1,2})$")


def clamp_fret(fret: int, max_fret: int = MAX_FRET) -> int:
    """
    Clamp a fret number into the playable range.

    Out-of-range frets are clamped rather than rejected: negative values
    become the open string and anything past ``max_fret`` becomes
    ``max_fret``. ``max_fret`` itself never exceeds :data:`MAX_FRET`.
    """
    upper = min(max_fret, MAX_FRET)
    return max(MIN_FRET, min(upper, int(fret)))


@dataclass(frozen=True)
class NoteToken:
    """
    A tagged value held by one cell of a string track.

    Attributes:
        kind:   Which notation variant this token is.
        fret:   First (or only) fret number; ``None`` for Empty and Muted.
        target: Second fret of a composite token, ``None`` otherwise.
    """

    kind: TokenKind
    fret: int | None = None
    target: int | None = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> NoteToken:
        return cls(TokenKind.EMPTY)

    @classmethod
    def fretted(cls, fret: int) -> NoteToken:
        return cls(TokenKind.FRETTED, clamp_fret(fret))

    @classmethod
    def muted(cls) -> NoteToken:
        return cls(TokenKind.MUTED)

    @classmethod
    def harmonic(cls, fret: int) -> NoteToken:
        return cls(TokenKind.HARMONIC, clamp_fret(fret))

    @classmethod
    def bend(cls, fret: int) -> NoteToken:
        return cls(TokenKind.BEND, clamp_fret(fret))

    @classmethod
    def release(cls, fret: int) -> NoteToken:
        return cls(TokenKind.RELEASE, clamp_fret(fret))

    @classmethod
    def vibrato(cls, fret: int) -> NoteToken:
        return cls(TokenKind.VIBRATO, clamp_fret(fret))

    @classmethod
    def composite(cls, kind: TokenKind, fret: int, target: int) -> NoteToken:
        """Build a two-fret token; ``kind`` must be one of the composite kinds."""
        if kind not in COMPOSITE_SYMBOLS:
            raise ValueError(f"{kind} is not a composite token kind.")
        return cls(kind, clamp_fret(fret), clamp_fret(target))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return self.kind is TokenKind.EMPTY

    @property
    def is_composite(self) -> bool:
        return self.kind in COMPOSITE_SYMBOLS

    @property
    def text(self) -> str:
        return encode_token(self)

    @property
    def display_length(self) -> int:
        """Number of monospace characters the token occupies."""
        return len(self.text)

    def __str__(self) -> str:
        return self.text


def encode_token(token: NoteToken) -> str:
    """Return the textual form of a token, e.g. ``"3/5"`` or ``"<12>"``."""
    kind = token.kind
    if kind is TokenKind.EMPTY:
        return EMPTY_TEXT
    if kind is TokenKind.MUTED:
        return "x"
    if kind is TokenKind.FRETTED:
        return str(token.fret)
    if kind is TokenKind.HARMONIC:
        return f"<{token.fret}>"
    if kind in ORNAMENT_SUFFIXES:
        return f"{token.fret}{ORNAMENT_SUFFIXES[kind]}"
    return f"{token.fret}{COMPOSITE_SYMBOLS[kind]}{token.target}"


def _in_range(*frets: int) -> bool:
    return all(MIN_FRET <= fret <= MAX_FRET for fret in frets)


def decode_token(text: str) -> NoteToken | None:
    """
    Parse the textual form of one cell.

    Surrounding whitespace is ignored and ``""`` / ``"-"`` decode to Empty.

    Returns:
        The decoded token, or ``None`` when the text is outside the cell
        grammar or carries a fret outside ``0..MAX_FRET``.
    """
    cleaned = text.strip()
    if cleaned in ("", EMPTY_TEXT):
        return NoteToken.empty()
    if cleaned.lower() == "x":
        return NoteToken.muted()

    match = _FRETTED_RE.match(cleaned)
    if match:
        fret = int(match.group(1))
        return NoteToken.fretted(fret) if _in_range(fret) else None

    match = _HARMONIC_RE.match(cleaned)
    if match:
        fret = int(match.group(1))
        return NoteToken.harmonic(fret) if _in_range(fret) else None

    match = _ORNAMENT_RE.match(cleaned)
    if match:
        fret = int(match.group(1))
        if not _in_range(fret):
            return None
        suffix = match.group(2)
        kind = next(k for k, s in ORNAMENT_SUFFIXES.items() if s == suffix)
        return NoteToken(kind, fret)

    match = _COMPOSITE_RE.match(cleaned)
    if match:
        fret, target = int(match.group(1)), int(match.group(3))
        if not _in_range(fret, target):
            return None
        return NoteToken.composite(_SYMBOL_TO_COMPOSITE[match.group(2)], fret, target)

    return None
