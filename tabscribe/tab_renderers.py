"""Renderer implementations for tab export formats."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tabscribe.alignment import column_widths
from tabscribe.tab_models import TabDocument
from tabscribe.techniques import technique_legend

CHORD_FILL = " "
NOTE_FILL = "-"


class TabRenderer(ABC):
    """Abstract tab renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(self, *, title: str, document: TabDocument) -> str:
        """Render a document into a file content string."""


class PlainTextTabRenderer(TabRenderer):
    """
    Render a document as the canonical monospace text block.

    Layout::

          Am  C
        e|0---3-|
        B|1---0-|
        ...

    The chord line is indented by the width of ``"<label>|"``; every
    column is padded to its aligned width plus ``column_gap`` fill
    characters (spaces on the chord line, dashes on string lines).
    Cell content longer than its column is written in full.
    """

    def __init__(self, column_gap: int = 1) -> None:
        self.column_gap = max(0, column_gap)

    @property
    def default_extension(self) -> str:
        return ".txt"

    def render(self, *, title: str = "", document: TabDocument) -> str:
        return "".join(f"{line}\n" for line in self.render_lines(document))

    def render_lines(self, document: TabDocument) -> list[str]:
        """Return the chord line followed by one line per string."""
        widths = [width + self.column_gap for width in column_widths(document)]
        label_width = max((len(track.label) for track in document.strings), default=0)

        chord_cells = "".join(
            document.chord_at(position).ljust(width, CHORD_FILL)
            for position, width in enumerate(widths)
        )
        lines = [" " * (label_width + 1) + chord_cells]

        for track in document.strings:
            cells = "".join(
                track.note_at(position).text.ljust(width, NOTE_FILL)
                for position, width in enumerate(widths)
            )
            lines.append(f"{track.label.ljust(label_width)}|{cells}|")
        return lines


class MarkdownTabRenderer(TabRenderer):
    """
    Render a document as Markdown: a title heading over a fenced text block.

    When the tab uses any techniques, a legend listing their symbols
    follows the block.
    """

    def __init__(self, column_gap: int = 1) -> None:
        self._text = PlainTextTabRenderer(column_gap=column_gap)

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(self, *, title: str = "", document: TabDocument) -> str:
        heading = f"# {title}\n\n" if title else ""
        content = f"{heading}```text\n{self._text.render(document=document)}```\n"

        kinds = {token.kind for track in document.strings for token in track.notes.values()}
        legend = technique_legend(kinds)
        if legend:
            content += "\n**Legend**\n\n"
            content += "".join(f"- `{spec.symbol}` {spec.label}\n" for _, spec in legend)
        return content
