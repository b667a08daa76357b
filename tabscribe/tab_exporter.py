"""TabExporter: renders tab documents to text or Markdown outputs."""

from __future__ import annotations

import logging
from typing import Final

from tabscribe.tab_models import TabDocument
from tabscribe.tab_renderers import (
    MarkdownTabRenderer,
    PlainTextTabRenderer,
    TabRenderer,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"text", "markdown"}


class TabExporter:
    """
    Render a tab document via a pluggable renderer.

    Supported formats:
    - ``text``: the plain monospace tab block.
    - ``markdown``: the same block in a fenced code block under a title heading.
    """

    def __init__(self, title: str = "", output_format: str = "text", column_gap: int = 1) -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized, column_gap)

    def _build_renderer(self, output_format: str, column_gap: int) -> TabRenderer:
        if output_format == "text":
            return PlainTextTabRenderer(column_gap=column_gap)
        return MarkdownTabRenderer(column_gap=column_gap)

    @property
    def default_extension(self) -> str:
        return self.renderer.default_extension

    def render(self, document: TabDocument) -> str:
        """Return the export string for ``document`` without touching the filesystem."""
        return self.renderer.render(title=self.title, document=document)

    def export(self, document: TabDocument, output_path: str) -> None:
        """
        Render ``document`` in the selected format and write it to disk.

        Raises:
            OSError: If the output file cannot be written.
        """
        content = self.render(document)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
        logger.info(
            "Wrote %s tab (%d columns) to %s",
            self.output_format,
            document.max_observed_length(),
            output_path,
        )
