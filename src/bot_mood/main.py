"""Application entrypoint — run a simulated mood session or inspect matrices."""

from __future__ import annotations

import argparse
import random
import sys
from collections import Counter

from bot_mood.config import Settings, get_settings
from bot_mood.driver.activity import ActivityTracker
from bot_mood.driver.clock import ManualClock
from bot_mood.driver.service import MoodDriver
from bot_mood.engine.emotion import EmotionEngine
from bot_mood.logger import setup_logging
from bot_mood.models import EngineContext, State

_NIGHT_HOUR = 23.0
_DAY_HOUR = 12.0


def build_driver(settings: Settings, clock: ManualClock, seed: int | None = None) -> MoodDriver:
    """Wire engine, tracker and driver from *settings*."""
    rng = random.Random(seed if seed is not None else settings.random_seed)
    engine = EmotionEngine(
        confidence=settings.initial_confidence,
        rng=rng,
        degenerate_fallback=settings.degenerate_fallback,
        clamp_before_normalize=settings.clamp_before_normalize,
    )
    tracker = ActivityTracker(
        adaptation_speed=settings.adaptation_speed,
        preferred_play_time=settings.preferred_play_time,
        activity_level=settings.default_activity_level,
    )
    return MoodDriver(
        engine,
        tracker,
        clock=clock,
        hour_of_day=clock.hour,
        rng=rng,
        base_state_duration=settings.base_state_duration_seconds,
        dwell_jitter=settings.dwell_jitter,
        cooldown=settings.state_change_cooldown_seconds,
        interaction_window=settings.interaction_window_seconds,
        day_start_hour=settings.day_start_hour,
        day_end_hour=settings.day_end_hour,
    )


def run_simulation(
    driver: MoodDriver,
    clock: ManualClock,
    seconds: float,
    tick: float,
    interact_every: float = 0.0,
) -> Counter[State]:
    """Tick *driver* for *seconds* of simulated time.

    Returns the simulated seconds spent in each state.
    """
    time_in_state: Counter[State] = Counter()
    elapsed = 0.0
    next_interaction = interact_every if interact_every > 0 else None
    while elapsed < seconds:
        if next_interaction is not None and elapsed >= next_interaction:
            driver.record_interaction()
            next_interaction += interact_every
        driver.tick()
        time_in_state[driver.state] += tick
        clock.advance(tick)
        elapsed += tick
    return time_in_state


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="bot-mood",
        description="Context-biased probabilistic emotion engine for desktop bots.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── simulate ──────────────────────────────────────────────
    sim_parser = sub.add_parser("simulate", help="Run a simulated session on a manual clock.")
    sim_parser.add_argument("--seconds", type=float, default=300.0)
    sim_parser.add_argument("--tick", type=float, default=0.1)
    sim_parser.add_argument("--seed", type=int, default=None)
    sim_parser.add_argument("--interact-every", type=float, default=0.0)
    sim_parser.add_argument("--night", action="store_true")

    # ── matrix ────────────────────────────────────────────────
    matrix_parser = sub.add_parser("matrix", help="Print the biased next-state distribution.")
    matrix_parser.add_argument("--state", choices=[s.value for s in State], default=State.IDLE.value)
    matrix_parser.add_argument("--interacted", action="store_true")
    matrix_parser.add_argument("--night", action="store_true")
    matrix_parser.add_argument("--activity", type=float, default=0.5)
    matrix_parser.add_argument("--confidence", type=float, default=None)

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    if args.command == "simulate":
        if args.tick <= 0:
            parser.error("--tick must be positive")
        clock = ManualClock(hour=_NIGHT_HOUR if args.night else _DAY_HOUR)
        driver = build_driver(settings, clock, seed=args.seed)
        totals = run_simulation(driver, clock, args.seconds, args.tick, args.interact_every)
        print(f"Simulated {args.seconds:.0f}s, final state: {driver.state.value}")
        for state in State:
            share = totals[state] / args.seconds if args.seconds else 0.0
            print(f"  {state.value:<8} {totals[state]:8.1f}s  {share:6.1%}")
        print(f"  confidence {driver.engine.confidence:.3f}")
    elif args.command == "matrix":
        confidence = settings.initial_confidence if args.confidence is None else args.confidence
        engine = EmotionEngine(
            confidence=confidence,
            degenerate_fallback=settings.degenerate_fallback,
            clamp_before_normalize=settings.clamp_before_normalize,
        )
        ctx = EngineContext(
            activity_level=args.activity,
            recently_interacted=args.interacted,
            is_daytime=not args.night,
        )
        dist = engine.distribution(State(args.state), ctx)
        for state, weight in dist:
            print(f"{state.value:<8} {weight:.4f}")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
