import random
import re
from datetime import date, datetime, timezone

import pytest

from textscan.errors import SequenceExhaustedError
from textscan.extractors.sequence import (
    AtomicDailyCounterProvider, DatePrefixedGenerator, FixedClock,
    RandomCounterProvider, TimestampSuffixGenerator, build_sequence_generator,
    resolve_identifiers,
)


class StubCounter:
    def __init__(self, value):
        self.value = value
        self.days = []

    def next_counter(self, day):
        self.days.append(day)
        return self.value


def test_timestamp_suffix_is_last_six_digits_of_epoch_millis():
    moment = datetime(2026, 3, 15, 10, 30, 0, 123000, tzinfo=timezone.utc)
    generated = TimestampSuffixGenerator(FixedClock(moment))()
    assert len(generated) == 6
    assert generated.isdigit()
    assert generated == str(int(moment.timestamp() * 1000))[-6:]


def test_date_prefixed_pads_counter(clock):
    counter = StubCounter(7)
    assert DatePrefixedGenerator(clock, counter)() == "20260315007"
    assert counter.days == [date(2026, 3, 15)]


def test_random_counter_stays_in_range():
    provider = RandomCounterProvider(random.Random(42))
    values = [provider.next_counter(date(2026, 3, 15)) for _ in range(500)]
    assert all(1 <= v <= 999 for v in values)


def test_random_strategy_format(clock):
    generated = build_sequence_generator("random", clock)()
    assert re.fullmatch(r"20260315\d{3}", generated)
    assert generated[-3:] != "000"


def test_daily_strategy_counts_per_day(store):
    day_one = build_sequence_generator("daily", FixedClock(datetime(2026, 3, 15, 9, 0)), store=store)
    day_two = build_sequence_generator("daily", FixedClock(datetime(2026, 3, 16, 9, 0)), store=store)
    assert [day_one(), day_one(), day_one()] == ["20260315001", "20260315002", "20260315003"]
    assert day_two() == "20260316001"
    assert day_one() == "20260315004"


def test_daily_counter_exhausted():
    class FullStore:
        def next_daily_counter(self, day):
            return 1000

    with pytest.raises(SequenceExhaustedError):
        AtomicDailyCounterProvider(FullStore()).next_counter(date(2026, 3, 15))


def test_daily_strategy_requires_store(clock):
    with pytest.raises(ValueError):
        build_sequence_generator("daily", clock)


def test_unknown_strategy(clock):
    with pytest.raises(ValueError):
        build_sequence_generator("uuid", clock)


def test_extracted_sequence_used_verbatim():
    def boom():
        raise AssertionError("generator must not be called")

    assert resolve_identifiers("0042", None, boom) == ("0042", "0042")
    assert resolve_identifiers("0042", "777", boom) == ("0042", "777")


def test_missing_sequence_is_generated_and_aliased():
    assert resolve_identifiers(None, None, lambda: "654321") == ("654321", "654321")
    assert resolve_identifiers("", "99", lambda: "654321") == ("654321", "99")
