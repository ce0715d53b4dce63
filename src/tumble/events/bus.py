from blinker import Signal
from typing import Dict

class EventBus:
    """Synchronous named-event bus built on blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems that are not stored anywhere alive.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (seconds)


# ============================================================================
# TRANSPORT BOUNDARY & COMMANDS
# ============================================================================
EVENT_OUTCOME_RECEIVED = "outcome_received"        # payload: outcome=Outcome
EVENT_PLAY_REQUESTED = "play_requested"            # payload: mode=str (optional)
EVENT_BOARD_CLEAR_REQUEST = "board_clear_request"  # payload: mode=str (optional)
EVENT_PACK_RECEIVED = "pack_received"              # payload: pack=PackOutcome
EVENT_REPLAY_TICKET = "replay_ticket"              # payload: ticket_index=int
EVENT_REPLAY_CLOSE = "replay_close"                # payload: None


# ============================================================================
# BOARD & LAYOUT
# ============================================================================
EVENT_BOARD_CHANGED = "board_changed"              # payload: reason=str, outcome_id=str|None
EVENT_RESIZE = "resize"                            # payload: width=float, height=float
EVENT_METRICS_CHANGED = "metrics_changed"          # payload: metrics=Metrics


# ============================================================================
# SEQUENCE NOTIFICATIONS (observers: HUD, telemetry)
# ============================================================================
EVENT_STEP_STARTED = "step_started"                # payload: index=int, total=int, outcome_id=str
EVENT_WIN_INCREMENTED = "win_incremented"          # payload: amount=float, outcome_id=str
EVENT_BONUS_TRIGGERED = "bonus_triggered"          # payload: payload=Any, outcome_id=str
EVENT_SEQUENCE_COMPLETED = "sequence_completed"    # payload: total_steps=int, outcome_id=str
EVENT_PHASE_CHANGED = "phase_changed"              # payload: phase=SequencePhase, step_index=int|None, outcome_id=str
EVENT_REEL_COLUMN_STOPPED = "reel_column_stopped"  # payload: col=int, spin_ticks=int


# ============================================================================
# ANIMATION
# ============================================================================
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: handle=int, properties=tuple[str,...]


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_STATE_CHANGED = "game_state_changed"    # payload: previous_state=PlayState|None, new_state=PlayState, context=PlayContext
EVENT_PACK_LOADED = "pack_loaded"                  # payload: pack_id=str, plays=int
EVENT_REPLAY_OPENED = "replay_opened"              # payload: ticket_index=int
EVENT_REPLAY_CLOSED = "replay_closed"              # payload: ticket_index=int|None
