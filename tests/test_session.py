"""Unit tests for EditingSession and the autosave debouncer."""

from typing import Any

import pytest

from tabscribe.config import EditorConfig
from tabscribe.session import AutosaveDebouncer, EditingSession
from tabscribe.tab_models import TabDocument
from tabscribe.techniques import TechniqueCode


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _session(**config: Any) -> tuple[EditingSession, list[dict[str, Any]], FakeClock]:
    saved: list[dict[str, Any]] = []
    clock = FakeClock()
    session = EditingSession(config=EditorConfig(**config), on_save=saved.append, clock=clock)
    return session, saved, clock


def _text(session: EditingSession, string_index: int, position: int) -> str:
    return session.document.note_at(string_index, position).text


# ---------------------------------------------------------------------------
# Note placement
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("fret", [0, 1, 12, 22])
def test_normal_note_reads_back(fret: int) -> None:
    session, _, _ = _session()
    session.place_note(3, fret)
    assert _text(session, 3, 0) == str(fret)
    assert session.current_position == 1


def test_single_note_techniques() -> None:
    session, _, _ = _session()
    for code in ("mute", "harmonic", "bend", "release", "vibrato"):
        session.set_technique(code)
        session.place_note(0, 7)
    assert [_text(session, 0, p) for p in range(5)] == ["x", "<7>", "7^", "7^r", "7~"]
    assert session.pending is None


def test_slide_round_trip() -> None:
    session, _, _ = _session()
    session.jump_to(4)
    session.set_technique(TechniqueCode.SLIDE_UP)
    session.place_note(2, 3)
    assert session.pending is not None
    assert _text(session, 2, 4) == "3"
    session.place_note(2, 5)
    assert _text(session, 2, 4) == "3/5"
    assert _text(session, 2, 5) == "5"
    assert session.pending is None
    assert session.current_position == 6


def test_cross_string_target_aborts() -> None:
    session, _, _ = _session()
    session.set_technique("hammerOn")
    session.place_note(2, 3)
    placement = session.place_note(3, 5)
    assert placement.aborted
    assert session.pending is None
    assert _text(session, 2, 0) == "3"
    assert _text(session, 3, 1) == "-"
    assert session.current_position == 1


def test_fret_out_of_range_is_clamped() -> None:
    session, _, _ = _session()
    session.place_note(0, 30)
    session.place_note(0, -2)
    assert [_text(session, 0, 0), _text(session, 0, 1)] == ["22", "0"]


def test_config_max_fret_narrows_range() -> None:
    session, _, _ = _session(max_fret=12)
    session.place_note(0, 15)
    assert _text(session, 0, 0) == "12"


def test_unknown_string_is_ignored() -> None:
    session, _, _ = _session()
    session.place_note(6, 3)
    assert session.current_position == 0
    assert not session.is_dirty


def test_cursor_stops_at_last_position() -> None:
    session, _, _ = _session(default_length=2)
    session.place_note(0, 1)
    session.place_note(0, 2)
    session.place_note(0, 3)
    assert session.current_position == 1
    assert session.length == 2
    assert _text(session, 0, 1) == "3"


def test_slide_at_last_position_keeps_composite() -> None:
    session, _, _ = _session(default_length=2)
    session.jump_to(1)
    session.set_technique("slideDown")
    session.place_note(4, 7)
    session.place_note(4, 5)
    assert _text(session, 4, 1) == "7\\5"


def test_auto_extend_grows_tab_at_the_end() -> None:
    session, _, _ = _session(default_length=2, extend_step=4, auto_extend=True)
    session.jump_to(1)
    session.place_note(0, 3)
    assert session.length == 6
    assert session.current_position == 2


def test_auto_extend_on_empty_tab_keeps_first_note() -> None:
    session = EditingSession(TabDocument.empty(0), config=EditorConfig(auto_extend=True))
    session.place_note(0, 5)
    assert _text(session, 0, 0) == "5"
    assert session.length == 16
    assert session.current_position == 1
    assert session.is_dirty


def test_auto_extend_on_empty_tab_keeps_slide_origin() -> None:
    session = EditingSession(
        TabDocument.empty(0),
        config=EditorConfig(auto_extend=True),
        technique=TechniqueCode.SLIDE_UP,
    )
    session.place_note(2, 3)
    session.place_note(2, 7)
    assert _text(session, 2, 0) == "3/7"
    assert _text(session, 2, 1) == "7"


# ---------------------------------------------------------------------------
# Pending technique cancellation
# ---------------------------------------------------------------------------

def _pending_session() -> EditingSession:
    session, _, _ = _session()
    session.set_technique("pullOff")
    session.place_note(1, 5)
    assert session.pending is not None
    return session


def test_note_on_unknown_string_cancels_pending() -> None:
    session = _pending_session()
    session.place_note(6, 3)
    assert session.pending is None
    session.place_note(1, 7)
    assert _text(session, 1, 0) == "5"
    assert _text(session, 1, 1) == "7"
    assert session.pending is not None


def test_cursor_move_cancels_pending() -> None:
    session = _pending_session()
    session.previous_position()
    assert session.pending is None


def test_technique_change_cancels_pending() -> None:
    session = _pending_session()
    session.set_technique("normal")
    assert session.pending is None


def test_clear_position_cancels_pending() -> None:
    session = _pending_session()
    session.clear_position(10)
    assert session.pending is None


def test_explicit_cancel() -> None:
    session = _pending_session()
    session.cancel_technique()
    session.place_note(1, 3)
    assert _text(session, 1, 0) == "5"
    assert _text(session, 1, 1) == "3"


# ---------------------------------------------------------------------------
# Cursor, chords, clearing
# ---------------------------------------------------------------------------

def test_move_cursor_is_clamped() -> None:
    session, _, _ = _session(default_length=4)
    session.move_cursor(-3)
    assert session.current_position == 0
    session.move_cursor(10)
    assert session.current_position == 3


def test_unknown_technique_is_ignored() -> None:
    session, _, _ = _session()
    session.set_technique("tapping")
    assert session.selected_technique is TechniqueCode.NORMAL


def test_chord_defaults_to_cursor() -> None:
    session, _, _ = _session()
    session.next_position()
    session.set_chord("Am")
    assert session.document.chord_at(1) == "Am"
    session.clear_chord()
    assert session.document.chords == {}


def test_clear_position_leaves_neighbours() -> None:
    session, _, _ = _session()
    session.set_chord("C")
    session.place_note(0, 3)
    session.place_note(1, 1)
    session.clear_position(0)
    assert session.document.chord_at(0) == ""
    assert _text(session, 0, 0) == "-"
    assert _text(session, 1, 1) == "1"


def test_remove_note() -> None:
    session, _, _ = _session()
    session.place_note(2, 2)
    session.remove_note(2, 0)
    assert _text(session, 2, 0) == "-"


def test_clear_all_respects_confirm() -> None:
    session, _, _ = _session()
    session.place_note(0, 3)
    assert not session.clear_all(confirm=lambda: False)
    assert _text(session, 0, 0) == "3"
    assert session.clear_all(confirm=lambda: True)
    assert _text(session, 0, 0) == "-"
    assert session.current_position == 0
    assert session.length == 32


def test_extend_defaults_to_step() -> None:
    session, _, _ = _session()
    session.place_note(0, 3)
    session.extend()
    session.extend(4)
    session.extend(-1)
    assert session.length == 52
    assert _text(session, 0, 0) == "3"


# ---------------------------------------------------------------------------
# Save, autosave, export
# ---------------------------------------------------------------------------

def test_save_hands_snapshot_to_callback() -> None:
    session, saved, _ = _session()
    session.set_technique("bend")
    session.place_note(0, 5)
    payload = session.save()
    assert saved == [payload]
    assert payload["tab"]["lines"][0]["notes"] == ["5^"]
    assert payload["selectedTechnique"] == "bend"
    assert payload["currentPosition"] == 1
    assert not session.is_dirty


def test_autosave_waits_for_quiet_period() -> None:
    session, saved, clock = _session(autosave_quiet_period=1.0)
    session.place_note(0, 1)
    clock.now = 0.6
    session.place_note(0, 2)
    clock.now = 1.2
    assert not session.poll_autosave()
    clock.now = 1.6
    assert session.poll_autosave()
    assert len(saved) == 1
    assert not session.poll_autosave()
    assert len(saved) == 1


def test_autosave_never_fires_without_mutation() -> None:
    session, saved, clock = _session()
    clock.now = 100.0
    assert not session.poll_autosave()
    assert saved == []


def test_no_op_edits_do_not_schedule_autosave() -> None:
    session, saved, clock = _session(default_length=4)
    session.set_chord("Am", position=99)
    session.remove_note(0, 2)
    session.clear_chord(3)
    session.clear_position(1)
    session.extend(0)
    session.clear_all()
    assert not session.is_dirty
    clock.now = 5.0
    assert not session.poll_autosave()
    assert saved == []


def test_rewriting_same_chord_is_not_a_mutation() -> None:
    session, _, _ = _session(default_length=4)
    session.set_chord("Am", position=1)
    session.save()
    session.set_chord("Am", position=1)
    assert not session.is_dirty


def test_placing_note_at_clamped_last_position_twice_is_not_a_mutation() -> None:
    session, _, _ = _session(default_length=1)
    session.place_note(0, 3)
    session.save()
    session.place_note(0, 3)
    assert not session.is_dirty


def test_manual_save_cancels_countdown() -> None:
    session, saved, clock = _session()
    session.place_note(0, 1)
    session.save()
    clock.now = 5.0
    assert not session.poll_autosave()
    assert len(saved) == 1


def test_aborted_placement_is_not_a_mutation() -> None:
    session = _pending_session()
    session.save()
    session.place_note(4, 2)
    assert not session.is_dirty


def test_export_text_matches_document() -> None:
    session, _, _ = _session(default_length=2)
    session.set_chord("Am")
    session.place_note(0, 10)
    first = session.export_text()
    assert first.splitlines()[:2] == ["  Am   ", "e|10---|"]
    assert session.export_text() == first


def test_from_payload_restores_cursor_and_technique() -> None:
    original, _, _ = _session()
    original.set_technique("vibrato")
    original.place_note(5, 9)
    restored = EditingSession.from_payload(original.snapshot())
    assert restored.current_position == 1
    assert restored.selected_technique is TechniqueCode.VIBRATO
    assert restored.document == original.document
    assert not restored.is_dirty


def test_debouncer_fires_once_per_countdown() -> None:
    calls: list[int] = []
    clock = FakeClock()
    debouncer = AutosaveDebouncer(0.5, lambda: calls.append(1), clock=clock)
    assert not debouncer.is_pending
    debouncer.touch()
    assert debouncer.is_pending
    clock.now = 0.5
    assert debouncer.fire_if_due()
    assert not debouncer.fire_if_due()
    assert calls == [1]
