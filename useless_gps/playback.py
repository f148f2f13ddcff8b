"""Timed playback of a simulated traveller along the straight line."""

import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from .config import CONFIG
from .errors import NoRouteDrawn, NoSamplesAvailable
from .geo import distance_meters, interpolate
from .logger import Logger
from .messages import compose_for_sample, is_interesting, pick_ending
from .models import Coordinate, PlaybackState, SamplePoint


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventKind(str, Enum):
    PROXIMITY = "proximity"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PlaybackEvent:
    kind: EventKind
    message: str
    step: int
    position: Coordinate
    sample_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "step": self.step,
            "position": self.position.to_dict(),
            "sample_index": self.sample_index,
        }


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


def playback_duration_ms(meters: float, config: Optional[dict] = None) -> float:
    config = config or CONFIG
    return min(config["playback_max_duration_ms"],
               max(config["playback_min_duration_ms"], meters * config["playback_speed_factor"]))


def scheduled_steps(meters: float, total_steps: int, config: Optional[dict] = None) -> list[int]:
    """Evenly spaced steps at which commentary is forced"""
    config = config or CONFIG
    count = math.ceil(meters / 1000 / config["scheduled_km_per_slot"])
    count = max(config["scheduled_min_slots"], min(config["scheduled_max_slots"], count))
    return [round(total_steps * (k + 1) / (count + 1)) for k in range(count)]


class PlaybackEngine:
    """State machine Idle -> Running -> Completed | Cancelled.

    The engine never sleeps on its own inside tick(); run() is the periodic
    timer that drives it. Ticks carrying a run id from an earlier run, or
    arriving after the run stopped, are ignored.

    Fired commentary is de-duplicated by sample index: a sample speaks at
    most once per run, whichever trigger picked it.
    """

    def __init__(self, config: Optional[dict] = None,
                 clock: Optional[Callable[[], float]] = None,
                 rng: Optional[random.Random] = None,
                 logger: Optional[Logger] = None,
                 on_event: Optional[Callable[[PlaybackEvent], None]] = None):
        self.config = config or CONFIG
        self.clock = clock or _monotonic_ms
        self.rng = rng or random.Random()
        self.logger = logger
        self.on_event = on_event

        self.status = PlaybackStatus.IDLE
        self.state: Optional[PlaybackState] = None
        self.total_steps = 0
        self.duration_ms = 0.0
        self.tick_interval_ms = self.config["playback_tick_interval_ms"]

        self._run_counter = 0
        self._start: Optional[Coordinate] = None
        self._end: Optional[Coordinate] = None
        self._samples: tuple[SamplePoint, ...] = ()
        self._messages: list[str] = []
        self._radius = 0.0
        self._slots: list[int] = []

    def _log(self, message: str, data: Optional[dict] = None):
        if self.logger:
            self.logger.log(message, data)

    @property
    def running(self) -> bool:
        return self.status is PlaybackStatus.RUNNING

    def start(self, start: Optional[Coordinate], end: Optional[Coordinate],
              samples: Sequence[SamplePoint], radius: float) -> int:
        """Begin a new run and return its id.

        A run already in progress is superseded; its pending ticks become stale.
        """
        if start is None or end is None:
            raise NoRouteDrawn()
        if not samples:
            raise NoSamplesAvailable()

        if self.running:
            self._log("Playback restarted", {"run_id": self.state.run_id})

        meters = distance_meters(start, end)
        self.duration_ms = playback_duration_ms(meters, self.config)
        self.total_steps = max(self.config["playback_min_steps"],
                               round(self.duration_ms / self.config["playback_tick_interval_ms"]))
        self.tick_interval_ms = max(self.config["playback_min_tick_interval_ms"],
                                    round(self.duration_ms / self.total_steps))

        self._start, self._end = start, end
        self._samples = tuple(samples)
        self._messages = [compose_for_sample(s.flags) for s in self._samples]
        self._radius = radius
        self._slots = (scheduled_steps(meters, self.total_steps, self.config)
                       if self.config["scheduled_triggers"] else [])

        self._run_counter += 1
        self.state = PlaybackState(
            run_id=self._run_counter,
            current_step=0,
            total_steps=self.total_steps,
            current_position=start,
        )
        self.status = PlaybackStatus.RUNNING
        self._log("Playback started", {
            "run_id": self._run_counter,
            "duration_ms": self.duration_ms,
            "total_steps": self.total_steps,
            "tick_interval_ms": self.tick_interval_ms,
            "scheduled_steps": self._slots,
        })
        return self._run_counter

    def cancel(self):
        """Stop the current run; later ticks for it are ignored"""
        if not self.running:
            return
        self._log("Playback cancelled", {"run_id": self.state.run_id,
                                         "step": self.state.current_step})
        self.status = PlaybackStatus.CANCELLED
        self.state = None

    def tick(self, run_id: Optional[int] = None) -> list[PlaybackEvent]:
        """Advance one step and return the events fired on it"""
        state = self.state
        if not self.running or state is None:
            self._log("Ignoring tick, playback not running", {"run_id": run_id})
            return []
        if run_id is not None and run_id != state.run_id:
            self._log("Ignoring stale tick", {"run_id": run_id, "current": state.run_id})
            return []

        t = state.current_step / state.total_steps
        state.current_position = interpolate(self._start, self._end, t)
        now = self.clock()

        events = []
        event = self._proximity_trigger(state, now) or self._scheduled_trigger(state, now)
        if event:
            events.append(event)

        if state.current_step >= state.total_steps:
            events.append(PlaybackEvent(
                kind=EventKind.COMPLETED,
                message=pick_ending(self.rng),
                step=state.current_step,
                position=state.current_position,
            ))
            self.status = PlaybackStatus.COMPLETED
            self.state = None
            self._log("Playback completed", {"run_id": state.run_id, "steps": state.total_steps})
        else:
            state.current_step += 1

        for event in events:
            if event.kind is not EventKind.COMPLETED:
                self._log("Commentary fired", event.to_dict())
            if self.on_event:
                self.on_event(event)
        return events

    def run(self, sleep: Callable[[float], None] = time.sleep):
        """Tick the current run every tick_interval_ms until it stops"""
        if not self.running:
            return
        run_id = self.state.run_id
        while self.running and self.state.run_id == run_id:
            self.tick(run_id)
            if self.running:
                sleep(self.tick_interval_ms / 1000)

    def _cooldown_elapsed(self, state: PlaybackState, now: float) -> bool:
        if state.last_fire_ms is None:
            return True
        return now - state.last_fire_ms >= self.config["trigger_cooldown_ms"]

    def _fire(self, state: PlaybackState, now: float, kind: EventKind,
              sample_index: int) -> PlaybackEvent:
        key = ("sample", sample_index)
        state.fired_keys.add(key)
        state.last_fired_key = key
        state.last_fire_ms = now
        return PlaybackEvent(
            kind=kind,
            message=self._messages[sample_index],
            step=state.current_step,
            position=state.current_position,
            sample_index=sample_index,
        )

    def _proximity_trigger(self, state: PlaybackState, now: float) -> Optional[PlaybackEvent]:
        """First interesting, not yet fired sample within radius"""
        for sample in self._samples:
            if ("sample", sample.index) in state.fired_keys:
                continue
            if distance_meters(state.current_position, sample.coordinate) > self._radius:
                continue
            if not is_interesting(self._messages[sample.index]):
                continue
            if not self._cooldown_elapsed(state, now):
                return None
            return self._fire(state, now, EventKind.PROXIMITY, sample.index)
        return None

    def _scheduled_trigger(self, state: PlaybackState, now: float) -> Optional[PlaybackEvent]:
        """Force the nearest sample's message at the latest due slot"""
        due = [k for k, step in enumerate(self._slots)
               if step <= state.current_step and ("slot", k) not in state.fired_keys]
        if not due:
            return None
        # Slots overtaken while the cooldown was running are dropped
        for k in due[:-1]:
            state.fired_keys.add(("slot", k))
        slot = due[-1]
        if not self._cooldown_elapsed(state, now):
            return None

        state.fired_keys.add(("slot", slot))
        nearest = min(self._samples,
                      key=lambda s: distance_meters(state.current_position, s.coordinate))
        if ("sample", nearest.index) in state.fired_keys:
            self._log("Scheduled slot skipped, sample already spoke",
                      {"slot": slot, "sample": nearest.index})
            return None
        return self._fire(state, now, EventKind.SCHEDULED, nearest.index)
