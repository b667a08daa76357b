"""Column alignment: minimum display width per tab position."""

import numpy as np

from tabscribe.tab_models import TabDocument


def column_widths(document: TabDocument) -> list[int]:
    """
    Compute the display width of every column of ``document``.

    A column is as wide as its longest note or chord label, and never
    narrower than one character. Columns cover the nominal length plus any
    cell written past it, so rendering never drops data.

    Algorithm
    ---------
    Build a ``(strings + 1) × columns`` matrix of display lengths, seeded
    with 1 (the width of an empty ``"-"`` cell); the last row holds chord
    label lengths. The widths are the column-wise maximum.

    Returns:
        One width per position, left to right.
    """
    column_count = document.max_observed_length()
    lengths = np.ones((len(document.strings) + 1, column_count), dtype=np.int64)

    for row, track in enumerate(document.strings):
        for position, token in track.notes.items():
            lengths[row, position] = token.display_length

    chord_row = len(document.strings)
    for position, label in document.chords.items():
        lengths[chord_row, position] = max(1, len(label))

    return [int(width) for width in lengths.max(axis=0)]
