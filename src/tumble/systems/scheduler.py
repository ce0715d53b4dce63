from __future__ import annotations

import itertools
import logging
from typing import Callable, Optional, Tuple

from esper import World

from tumble.components.delayed_call import DelayedCall
from tumble.components.sequence_run import SequenceRun
from tumble.events.bus import EVENT_TICK, EventBus

logger = logging.getLogger("tumble.scheduler")

# Float slack when comparing a due time against the tick target.
_DUE_EPSILON = 1e-9


class TimerSystem:
    """Tick-driven scheduler of cancellable delayed calls.

    Calls fire in ``(due, seq)`` order. A call scheduled from inside a callback
    is timed from the firing call's due time and still fires in the same tick
    when it is already due, so the firing order never depends on how the
    elapsed time is split into ticks.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.now = 0.0
        self._seq = itertools.count()
        event_bus.subscribe(EVENT_TICK, self.on_tick)

    def schedule(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        run: Optional[SequenceRun] = None,
        label: str = "",
    ) -> int:
        due = self.now + max(0.0, float(delay))
        return self.world.create_entity(DelayedCall(due, next(self._seq), callback, run, label))

    def cancel_run(self, run: SequenceRun) -> int:
        doomed = [ent for ent, call in self.world.get_component(DelayedCall) if call.run is run]
        for ent in doomed:
            self.world.delete_entity(ent, immediate=True)
        if doomed:
            logger.debug("Dropped %d pending calls of run %d", len(doomed), run.run_id)
        return len(doomed)

    def pending(self, run: Optional[SequenceRun] = None) -> int:
        return sum(1 for _, call in self.world.get_component(DelayedCall) if run is None or call.run is run)

    def _next_due(self, target: float) -> Optional[Tuple[int, DelayedCall]]:
        best: Optional[Tuple[int, DelayedCall]] = None
        for ent, call in self.world.get_component(DelayedCall):
            if call.due > target + _DUE_EPSILON:
                continue
            if best is None or (call.due, call.seq) < (best[1].due, best[1].seq):
                best = (ent, call)
        return best

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        try:
            dt = max(0.0, float(dt))
        except (TypeError, ValueError):
            return
        target = self.now + dt
        while True:
            nxt = self._next_due(target)
            if nxt is None:
                break
            ent, call = nxt
            self.world.delete_entity(ent, immediate=True)
            self.now = max(self.now, call.due)
            if call.run is not None and call.run.cancelled:
                continue
            call.callback()
        self.now = target
