# textscan/extractors/sequence.py
"""
Sequence number policy.

An extracted number is used verbatim. Otherwise a generator produces one:

- "timestamp": last 6 characters of the epoch in milliseconds. Not scoped to
  the day and may collide for calls made within the same truncated window.
- "random":    YYYYMMDD + a random counter in [1, 999]. Placeholder for a
  real per-day sequence, not suitable for production.
- "daily":     YYYYMMDD + a per-day counter incremented atomically in the
  store.

The document number is never generated on its own: when it cannot be read
it takes the sequence number.
"""
from __future__ import annotations
import random
from datetime import date, datetime
from typing import Callable, Optional, Protocol, Tuple

from ..errors import SequenceExhaustedError

COUNTER_MIN = 1
COUNTER_MAX = 999


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


class SequenceCounterProvider(Protocol):
    def next_counter(self, day: date) -> int: ...


class RandomCounterProvider:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def next_counter(self, day: date) -> int:
        return self.rng.randint(COUNTER_MIN, COUNTER_MAX)


class AtomicDailyCounterProvider:
    """Counter backed by ComprobanteStore.next_daily_counter."""

    def __init__(self, store):
        self.store = store

    def next_counter(self, day: date) -> int:
        n = self.store.next_daily_counter(day)
        if n > COUNTER_MAX:
            raise SequenceExhaustedError(f"Secuencia agotada para {day.isoformat()}")
        return n


SequenceGenerator = Callable[[], str]


class TimestampSuffixGenerator:
    def __init__(self, clock: Clock):
        self.clock = clock

    def __call__(self) -> str:
        millis = int(self.clock.now().timestamp() * 1000)
        return str(millis)[-6:]


class DatePrefixedGenerator:
    def __init__(self, clock: Clock, counter: SequenceCounterProvider):
        self.clock = clock
        self.counter = counter

    def __call__(self) -> str:
        day = self.clock.now().date()
        return f"{day:%Y%m%d}{self.counter.next_counter(day):03d}"


def build_sequence_generator(strategy: str, clock: Clock, store=None) -> SequenceGenerator:
    if strategy == "timestamp":
        return TimestampSuffixGenerator(clock)
    if strategy == "random":
        return DatePrefixedGenerator(clock, RandomCounterProvider())
    if strategy == "daily":
        if store is None:
            raise ValueError("The 'daily' sequence strategy needs a store")
        return DatePrefixedGenerator(clock, AtomicDailyCounterProvider(store))
    raise ValueError(f"Unknown sequence strategy: {strategy!r}")


def resolve_identifiers(sequence: Optional[str],
                        document: Optional[str],
                        generate: SequenceGenerator) -> Tuple[str, str]:
    seq = sequence or generate()
    return seq, (document or seq)
