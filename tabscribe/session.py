"""EditingSession: cursor, technique, and autosave state around a TabDocument."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from tabscribe.config import EditorConfig
from tabscribe.persistence import document_to_payload, payload_to_state
from tabscribe.tab_models import TabDocument
from tabscribe.tab_renderers import PlainTextTabRenderer
from tabscribe.techniques import PendingTechnique, Placement, TechniqueCode, TechniqueResolver
from tabscribe.tokens import clamp_fret

logger = logging.getLogger(__name__)

SaveCallback = Callable[[dict[str, Any]], None]


class AutosaveDebouncer:
    """
    Single-shot countdown restarted by every mutation.

    The host drives it by calling :meth:`fire_if_due`; the callback runs
    once the quiet period has elapsed since the last :meth:`touch`, and at
    most once per countdown.

    Usage:

        debouncer = AutosaveDebouncer(1.0, session.save)
        debouncer.touch()          # on every mutation
        debouncer.fire_if_due()    # from the host's event loop
    """

    def __init__(
        self,
        quiet_period: float,
        callback: Callable[[], Any],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.quiet_period = max(0.0, quiet_period)
        self._callback = callback
        self._clock = clock
        self._deadline: float | None = None

    @property
    def is_pending(self) -> bool:
        return self._deadline is not None

    def touch(self) -> None:
        self._deadline = self._clock() + self.quiet_period

    def cancel(self) -> None:
        self._deadline = None

    def due(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def fire_if_due(self) -> bool:
        if not self.due():
            return False
        self._deadline = None
        self._callback()
        return True


class EditingSession:
    """
    Thin orchestrator over a TabDocument.

    Holds the cursor, the selected technique, and the technique resolver;
    every change to persisted state marks the session dirty and restarts
    the autosave countdown. Nothing here raises on bad input: positions
    are clamped, unknown techniques and strings are ignored, and fret
    numbers are clamped into the playable range.
    """

    def __init__(
        self,
        document: TabDocument | None = None,
        *,
        config: EditorConfig | None = None,
        on_save: SaveCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
        current_position: int = 0,
        technique: TechniqueCode = TechniqueCode.NORMAL,
    ) -> None:
        self.config = config or EditorConfig()
        if document is None:
            document = TabDocument.empty(self.config.default_length)
        self.document = document
        self.on_save = on_save
        self.selected_technique = technique
        self.current_position = self._clamp_position(current_position)
        self.is_dirty = False
        self._resolver = TechniqueResolver()
        self._autosave = AutosaveDebouncer(self.config.autosave_quiet_period, self.save, clock=clock)

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        config: EditorConfig | None = None,
        on_save: SaveCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> EditingSession:
        """Restore a session from a persisted payload (sanitized, never raises)."""
        state = payload_to_state(payload, config)
        return cls(
            state.document,
            config=config,
            on_save=on_save,
            clock=clock,
            current_position=state.current_position,
            technique=state.technique,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        return self.document.length

    @property
    def pending(self) -> PendingTechnique | None:
        return self._resolver.pending

    def _clamp_position(self, position: int) -> int:
        return max(0, min(self.document.length - 1, position))

    def _mark_dirty(self) -> None:
        self.is_dirty = True
        self._autosave.touch()

    def _cancel_pending(self) -> None:
        if self._resolver.is_awaiting_target:
            logger.debug("Cancelled pending %s", self._resolver.pending)
        self._resolver.cancel()

    def _auto_extend(self, position: int) -> None:
        if self.config.auto_extend and position >= self.document.length:
            self.document.extend(self.config.extend_step)
            logger.debug("Auto-extended tab to %d positions", self.document.length)

    def _advance(self) -> None:
        self._auto_extend(self.current_position + 1)
        self.current_position = self._clamp_position(self.current_position + 1)

    # ------------------------------------------------------------------
    # Note placement
    # ------------------------------------------------------------------

    def place_note(self, string_index: int, fret: int) -> Placement:
        """
        Place a note on ``string_index`` at the cursor using the selected technique.

        A two-note technique left pending by the previous call is completed
        when the string matches and discarded otherwise.
        """
        if not 0 <= string_index < len(self.document.strings):
            logger.debug("Ignoring note on unknown string %d", string_index)
            self._cancel_pending()
            return Placement()

        clamped = clamp_fret(fret, self.config.max_fret)
        if clamped != fret:
            logger.debug("Clamped fret %d to %d", fret, clamped)

        placement = self._resolver.resolve(
            string_index, clamped, self.current_position, self.selected_technique
        )
        if placement.aborted:
            logger.debug("Pending technique discarded: note placed on string %d", string_index)
            return placement

        before = (self.document.length, self.current_position)
        self._auto_extend(self.current_position)
        changed = False
        for write in placement.writes:
            if self.document.set_note(write.string_index, write.position, write.token):
                changed = True
        if placement.advance:
            self._advance()
        if changed or (self.document.length, self.current_position) != before:
            self._mark_dirty()
        return placement

    def remove_note(self, string_index: int, position: int) -> None:
        if self.document.clear_cell(string_index, position):
            self._mark_dirty()

    # ------------------------------------------------------------------
    # Cursor and technique
    # ------------------------------------------------------------------

    def move_cursor(self, delta: int) -> None:
        self.jump_to(self.current_position + delta)

    def next_position(self) -> None:
        self.move_cursor(1)

    def previous_position(self) -> None:
        self.move_cursor(-1)

    def jump_to(self, position: int) -> None:
        self._cancel_pending()
        clamped = self._clamp_position(position)
        if clamped != self.current_position:
            self.current_position = clamped
            self._mark_dirty()

    def set_technique(self, code: TechniqueCode | str) -> None:
        technique = TechniqueCode.parse(code)
        if technique is None:
            logger.debug("Ignoring unknown technique %r", code)
            return
        self._cancel_pending()
        if technique is not self.selected_technique:
            self.selected_technique = technique
            self._mark_dirty()

    def cancel_technique(self) -> None:
        self._cancel_pending()

    # ------------------------------------------------------------------
    # Chords and clearing
    # ------------------------------------------------------------------

    def set_chord(self, label: str, position: int | None = None) -> None:
        target = self.current_position if position is None else position
        if self.document.set_chord(target, label):
            self._mark_dirty()

    def clear_chord(self, position: int | None = None) -> None:
        target = self.current_position if position is None else position
        if self.document.clear_chord(target):
            self._mark_dirty()

    def clear_position(self, position: int | None = None) -> None:
        self._cancel_pending()
        target = self.current_position if position is None else position
        if self.document.clear_position(target):
            self._mark_dirty()

    def clear_all(self, confirm: Callable[[], bool] | None = None) -> bool:
        """
        Empty the whole tab, keeping its length.

        Args:
            confirm: Optional capability asked before anything is cleared;
                     returning False leaves the session untouched.

        Returns:
            True if the tab was cleared.
        """
        if confirm is not None and not confirm():
            return False
        self._cancel_pending()
        changed = self.document.clear_all() or self.current_position != 0
        self.current_position = 0
        if changed:
            self._mark_dirty()
        return True

    def extend(self, amount: int | None = None) -> None:
        step = self.config.extend_step if amount is None else amount
        if self.document.extend(step):
            self._mark_dirty()

    # ------------------------------------------------------------------
    # Save and export
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Return the persisted payload for the current state."""
        return document_to_payload(self.document, self.current_position, self.selected_technique)

    def save(self) -> dict[str, Any]:
        """Hand a snapshot to ``on_save`` and clear the dirty flag."""
        payload = self.snapshot()
        self._autosave.cancel()
        if self.on_save is not None:
            self.on_save(payload)
        self.is_dirty = False
        return payload

    def poll_autosave(self) -> bool:
        """Save if the quiet period has elapsed since the last mutation."""
        return self._autosave.fire_if_due()

    def export_text(self) -> str:
        return PlainTextTabRenderer(column_gap=self.config.column_gap).render(document=self.document)
