# ============================================================================
# BOARD
# ============================================================================
DEFAULT_ROWS = 7
DEFAULT_COLS = 5
# Board shapes used when no outcome is loaded, keyed by play mode.
PREVIEW_SHAPES = {
    "nivel1": (3, 5),
    "nivel2": (7, 5),
}
BONUS_TRIGGER_SYMBOL = "N"
BONUS_HIGHLIGHT_LIMIT = 3
# Strip symbols used by the reel-spin intro when the grid holds no symbols.
FALLBACK_STRIP_SYMBOLS = tuple("ABCDEFGHIJKLMNO")
REEL_STRIP_MIN_LENGTH = 28


# ============================================================================
# LAYOUT (pixels)
# ============================================================================
DEFAULT_CONTAINER_WIDTH = 640
DEFAULT_CONTAINER_HEIGHT = 640
MIN_CELL_SIZE = 20
MAX_CELL_SIZE = 72
CELL_GAP = 2
BOARD_TOP_OFFSET = 32
PADDING_WIDE = 12
PADDING_NARROW = 8
WIDE_CONTAINER_THRESHOLD = 640
MIN_USABLE_EXTENT = 120


# ============================================================================
# SEQUENCER TIMING (seconds)
# ============================================================================
MIN_INITIAL_DELAY = 0.32
INTRO_TAIL = 0.12
INTER_STEP_DELAY = 0.25
MATCH_CONTOUR_DURATION = 0.34
REMOVAL_DURATION = 0.52
REMOVAL_TAIL = 0.16
MIN_SETTLE = 0.12
EXPLOSION_DURATION = 0.6
BONUS_HIGHLIGHT_BASE = 1.28
BONUS_HIGHLIGHT_STAGGER = 0.12
BONUS_PULSE_DURATION = 0.18


# ============================================================================
# FILL MODES (seconds)
# ============================================================================
REPLACE_INTRO_STEP = 0.04
REPLACE_INTRO_DURATION = 0.26
REPLACE_APPEAR_DURATION = 0.28

CASCADE_INTRO_COLUMN_DELAY = 0.12
CASCADE_INTRO_DROP = 0.38
CASCADE_REFILL_COLUMN_DELAY = 0.05
CASCADE_DROP_DURATION = 0.48

REEL_COLUMN_START_DELAY = 0.32
REEL_DROP_DURATION = 0.28
REEL_STOP_DELAY = 0.22
REEL_SETTLE_DURATION = 0.26
REEL_SPIN_TICK = 0.09
REEL_MIN_TURNS_LAST_COLUMN = 2
REEL_WOBBLE = 2.0
