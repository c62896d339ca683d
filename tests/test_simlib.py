import io

import pytest

from drycleansim.lcgrand import LcgRandom
from drycleansim.simlib import (
    INFINITY,
    LIST_EVENT,
    MAX_ATTR,
    MAX_SVAR,
    Option,
    SampleStats,
    Simlib,
    SimlibError,
    TimeStats,
    format_value,
)


@pytest.fixture
def sim():
    return Simlib(max_attr=4)


def _record(sim, **attrs):
    rec = sim.new_record()
    for key, value in attrs.items():
        rec[int(key[1:])] = value
    return rec


def _numbers_on_line(text, label):
    for line in text.splitlines():
        if line.startswith(label):
            return [float(x) for x in line.split()[1:]]
    raise AssertionError(f"no line {label!r}")


def test_new_record_sized_by_max_attr(sim):
    assert sim.new_record() == [0.0] * 5


def test_small_max_attr_falls_back_to_default():
    assert Simlib(max_attr=2).max_attr == MAX_ATTR


def test_timing_orders_events_with_fifo_ties(sim):
    sim.event_schedule(5.0, 1)
    sim.event_schedule(2.0, 2)
    sim.event_schedule(5.0, 3)
    order = []
    while sim.list_size(LIST_EVENT):
        sim.timing()
        order.append((sim.sim_time, sim.next_event_type))
    assert order == [(2.0, 2), (5.0, 1), (5.0, 3)]


def test_event_record_attributes_carried(sim):
    rec = _record(sim, a3=42.0)
    sim.event_schedule(1.0, 7, rec)
    rec[3] = 0.0
    got = sim.timing()
    assert got[3] == 42.0
    assert sim.next_event_type == 7


def test_time_reversal_raises(sim):
    sim.event_schedule(5.0, 1)
    sim.timing()
    sim.event_schedule(3.0, 2)
    with pytest.raises(SimlibError):
        sim.timing()


def test_timing_on_empty_calendar_raises(sim):
    with pytest.raises(SimlibError):
        sim.timing()


def test_first_and_last_filing(sim):
    for value in (1.0, 2.0, 3.0):
        sim.list_file(Option.LAST, 1, _record(sim, a1=value))
    sim.list_file(Option.FIRST, 1, [0.0, 0.5])
    assert sim.peek(1)[1] == 0.5
    assert [sim.list_remove(Option.FIRST, 1)[1] for _ in range(2)] == [0.5, 1.0]
    assert sim.list_remove(Option.LAST, 1)[1] == 3.0
    assert sim.list_size(1) == 1


def test_integer_options_accepted(sim):
    sim.list_file(2, 1, _record(sim, a1=9.0))
    assert sim.list_remove(1, 1)[1] == 9.0


def test_peek_empty_is_none(sim):
    assert sim.peek(2) is None


def test_invalid_list_raises(sim):
    with pytest.raises(SimlibError):
        sim.list_file(Option.LAST, 26, sim.new_record())
    with pytest.raises(SimlibError):
        sim.list_remove(Option.FIRST, -1)


def test_invalid_option_raises(sim):
    with pytest.raises(SimlibError):
        sim.list_file(5, 1, sim.new_record())
    sim.list_file(Option.LAST, 1, sim.new_record())
    with pytest.raises(SimlibError):
        sim.list_remove(Option.INCREASING, 1)


def test_underflow_raises(sim):
    with pytest.raises(SimlibError):
        sim.list_remove(Option.FIRST, 1)


def test_oversized_record_raises(sim):
    with pytest.raises(SimlibError):
        sim.list_file(Option.LAST, 1, [0.0] * 6)


def test_increasing_order_on_ranked_list(sim):
    sim.list_rank[2] = 3
    for tag, key in enumerate((5.0, 1.0, 5.0, 3.0)):
        sim.list_file(Option.INCREASING, 2, _record(sim, a3=key, a4=float(tag)))
    removed = [sim.list_remove(Option.FIRST, 2) for _ in range(4)]
    assert [(r[3], r[4]) for r in removed] == [(1.0, 1.0), (3.0, 3.0), (5.0, 0.0), (5.0, 2.0)]


def test_decreasing_order_on_ranked_list(sim):
    sim.list_rank[2] = 3
    for key in (2.0, 7.0, 4.0):
        sim.list_file(Option.DECREASING, 2, _record(sim, a3=key))
    assert [sim.list_remove(Option.FIRST, 2)[3] for _ in range(3)] == [7.0, 4.0, 2.0]


def test_ranked_insert_without_rank_raises(sim):
    sim.list_file(Option.LAST, 3, sim.new_record())
    with pytest.raises(SimlibError):
        sim.list_file(Option.INCREASING, 3, sim.new_record())


def test_event_cancel(sim):
    for time, kind in ((1.0, 1), (2.0, 2), (3.0, 3), (4.0, 2)):
        sim.event_schedule(time, kind)
    cancelled = sim.event_cancel(2)
    assert cancelled[1] == 2.0
    assert sim.list_size(LIST_EVENT) == 3
    assert sim.event_cancel(9) is None
    kinds = []
    while sim.list_size(LIST_EVENT):
        sim.timing()
        kinds.append(sim.next_event_type)
    assert kinds == [1, 3, 2]


def test_event_cancel_on_empty_calendar(sim):
    assert sim.event_cancel(1) is None


def test_sampst_summary(sim):
    for value in (2.0, 4.0, 9.0):
        sim.sampst(value, 1)
    assert sim.sampst_summary(1) == SampleStats(mean=5.0, count=3, maximum=9.0, minimum=2.0)


def test_sampst_empty_defaults(sim):
    assert sim.sampst_summary(2) == SampleStats(0.0, 0, -INFINITY, INFINITY)


def test_reset_sampst(sim):
    sim.sampst(3.0, 1)
    sim.reset_sampst()
    assert sim.sampst_summary(1).count == 0


def test_sampst_invalid_variable(sim):
    with pytest.raises(SimlibError):
        sim.sampst(1.0, 0)
    with pytest.raises(SimlibError):
        sim.sampst_summary(MAX_SVAR + 1)


def test_timest_average(sim):
    sim.timest(2.0, 1)
    sim.sim_time = 4.0
    sim.timest(0.0, 1)
    sim.sim_time = 8.0
    assert sim.timest_summary(1) == TimeStats(1.0, 2.0, 0.0)


def test_filest_tracks_list_length(sim):
    sim.list_file(Option.LAST, 3, sim.new_record())
    sim.sim_time = 10.0
    sim.list_remove(Option.FIRST, 3)
    sim.sim_time = 20.0
    stats = sim.filest(3)
    assert stats.average == pytest.approx(0.5)
    assert stats.maximum == 1.0
    assert stats.minimum == 0.0


def test_filest_unused_list_keeps_sentinels(sim):
    sim.sim_time = 5.0
    stats = sim.filest(4)
    assert stats.maximum == -INFINITY
    assert stats.minimum == INFINITY


def test_format_value_round_trips():
    assert float(format_value(1.5)) == 1.5
    assert float(format_value(INFINITY)) == 0.0
    assert format_value(-INFINITY) == format_value(INFINITY)
    assert len(format_value(INFINITY)) + 1 == len(format_value(1.5))


def test_out_sampst(sim):
    sim.sampst(3.0, 1)
    buf = io.StringIO()
    sim.out_sampst(buf, 1, 2)
    text = buf.getvalue()
    assert "sampst" in text
    assert _numbers_on_line(text, "    1") == [3.0, 1.0, 3.0, 3.0]
    assert _numbers_on_line(text, "    2") == [0.0, 0.0, 0.0, 0.0]


def test_out_sampst_bad_range_writes_nothing(sim):
    buf = io.StringIO()
    sim.out_sampst(buf, 3, 2)
    assert buf.getvalue() == ""


def test_out_timest(sim):
    sim.timest(2.0, 1)
    sim.sim_time = 4.0
    buf = io.StringIO()
    sim.out_timest(buf, 1, 1)
    assert _numbers_on_line(buf.getvalue(), "    1") == [2.0, 2.0, 2.0]


def test_out_filest(sim):
    sim.list_file(Option.LAST, 4, sim.new_record())
    sim.sim_time = 2.0
    buf = io.StringIO()
    sim.out_filest(buf, 4, 4)
    assert _numbers_on_line(buf.getvalue(), "    4") == [1.0, 1.0, 1.0]
    empty = io.StringIO()
    sim.out_filest(empty, 1, 26)
    assert empty.getvalue() == ""


def test_variates_deterministic():
    first, second = Simlib(), Simlib()
    assert [first.expon(3.0, 1) for _ in range(5)] == [second.expon(3.0, 1) for _ in range(5)]


def test_expon_positive(sim):
    assert all(sim.expon(2.0, 4) > 0 for _ in range(100))


def test_uniform_in_range(sim):
    assert all(3.0 <= sim.uniform(3.0, 5.0, 2) <= 5.0 for _ in range(100))


def test_uniform_unit_matches_stream():
    sim = Simlib()
    rng = LcgRandom()
    assert [sim.uniform(0.0, 1.0, 6) for _ in range(5)] == [rng.random(6) for _ in range(5)]


def test_injected_generator_is_used():
    sim = Simlib(rng=LcgRandom([1] * 10))
    assert sim.uniform(0.0, 1.0, 1) == LcgRandom([1] * 10).random(1)


def test_erlang_of_one_is_exponential():
    a, b = Simlib(), Simlib()
    assert a.erlang(1, 4.0, 3) == pytest.approx(b.expon(4.0, 3))
    assert a.erlang(3, 4.0, 3) > 0


def test_random_integer(sim):
    assert sim.random_integer([1.0], 1) == 1
    assert sim.random_integer([0.0, 1.0], 1) == 2
    with pytest.raises(SimlibError):
        sim.random_integer([], 1)