"""EditorConfig: tunable parameters for the tab editing engine."""

from dataclasses import dataclass


@dataclass
class EditorConfig:
    """Holds the tunable parameters shared by the session and renderers."""

    # Grid capacity
    default_length: int = 32
    extend_step: int = 16
    auto_extend: bool = False  # grow by extend_step when the cursor runs off the end

    # Guitar properties
    max_fret: int = 22

    # Autosave debounce, in seconds after the last mutation
    autosave_quiet_period: float = 1.0

    # Fill characters between columns in text output
    column_gap: int = 1
