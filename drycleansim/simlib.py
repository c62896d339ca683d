"""Discrete-event simulation support: lists, event calendar, statistics, variates."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import TextIO

from .lcgrand import LcgRandom

MAX_LIST = 25
MAX_ATTR = 10
MAX_SVAR = 25
TIM_VAR = 25
MAX_TVAR = 50
EPSILON = 0.001
LIST_EVENT = 25
INFINITY = 1.0e30
EVENT_TIME = 1
EVENT_TYPE = 2

_RULE = "\n___________________________________"
_RULE_TAIL = "_____________________________________"
_WIDE_RULE = "\n_______________________________________________________"


class SimlibError(RuntimeError):
    """Raised when the simulation is asked to do something impossible."""


class Option(IntEnum):
    """Where a record goes in, or comes out of, a list."""

    FIRST = 1
    LAST = 2
    INCREASING = 3
    DECREASING = 4


@dataclass(frozen=True)
class SampleStats:
    """Summary of a discrete-time statistic."""

    mean: float
    count: int
    maximum: float
    minimum: float


@dataclass(frozen=True)
class TimeStats:
    """Summary of a continuous-time statistic."""

    average: float
    maximum: float
    minimum: float


@dataclass
class _SampleAccumulator:
    total: float = 0.0
    maximum: float = -INFINITY
    minimum: float = INFINITY
    count: int = 0


@dataclass
class _TimeAccumulator:
    last_change: float
    area: float = 0.0
    maximum: float = -INFINITY
    minimum: float = INFINITY
    previous: float = 0.0


def format_value(value: float) -> str:
    """Format one report value; the sentinel extremes print as zero."""
    if value == INFINITY or value == -INFINITY:
        return "%#15.6G " % 0.0
    return " %#15.6G " % value


def _ratio(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0:
        return math.nan
    return math.copysign(math.inf, numerator)


class Simlib:
    """Simulation state: the lists, the event calendar, the clock and statistics."""

    def __init__(
        self,
        max_attr: int | None = None,
        max_list: int | None = None,
        rng: LcgRandom | None = None,
    ) -> None:
        if max_attr is None or max_attr < 4:
            max_attr = MAX_ATTR
        if max_list is None or max_list < 1:
            max_list = MAX_LIST
        if max_list > MAX_LIST:
            raise ValueError(f"max_list may not exceed {MAX_LIST}")
        self.max_attr = max_attr
        self.max_list = max_list
        self.rng = rng if rng is not None else LcgRandom()
        self.sim_time = 0.0
        self.next_event_type = 0
        self._lists: list[deque[list[float]]] = [deque() for _ in range(MAX_LIST + 1)]
        self.list_rank = [0] * (MAX_LIST + 1)
        self.list_rank[LIST_EVENT] = EVENT_TIME
        self.reset_sampst()
        self.reset_timest()

    # Lists

    def new_record(self) -> list[float]:
        """Return a blank record; attributes are numbered from 1."""
        return [0.0] * (self.max_attr + 1)

    def _check_list(self, list_id: int, action: str) -> deque[list[float]]:
        if not (0 <= list_id <= self.max_list or list_id == LIST_EVENT):
            raise SimlibError(
                f"invalid list {list_id} for {action} at time {self.sim_time:f}"
            )
        return self._lists[list_id]

    def _prepare(self, record: Sequence[float]) -> list[float]:
        values = [float(value) for value in record]
        if len(values) > self.max_attr + 1:
            raise SimlibError(
                f"record has {len(values) - 1} attributes, at most {self.max_attr} allowed"
            )
        values.extend([0.0] * (self.max_attr + 1 - len(values)))
        return values

    def list_size(self, list_id: int) -> int:
        """Return the number of records in a list."""
        return len(self._check_list(list_id, "list_size"))

    def peek(self, list_id: int) -> list[float] | None:
        """Return a copy of the first record of a list, or None if it is empty."""
        items = self._check_list(list_id, "peek")
        return list(items[0]) if items else None

    def list_file(self, option: int, list_id: int, record: Sequence[float]) -> None:
        """File a copy of ``record`` into a list and update its length statistic."""
        items = self._check_list(list_id, "list_file")
        try:
            option = Option(option)
        except ValueError:
            raise SimlibError(
                f"{option} is an invalid option for list_file on list {list_id} "
                f"at time {self.sim_time:f}"
            ) from None
        row = self._prepare(record)

        if not items or option is Option.FIRST:
            index = 0
        elif option is Option.LAST:
            index = len(items)
        else:
            key = self.list_rank[list_id]
            if not 1 <= key <= self.max_attr:
                raise SimlibError(
                    f"{key} is an improper value for rank of list {list_id} "
                    f"at time {self.sim_time:f}"
                )
            new = row[key]
            if option is Option.INCREASING:
                index = next(
                    (i for i, other in enumerate(items) if not new >= other[key]),
                    len(items),
                )
            else:
                index = next(
                    (i for i, other in enumerate(items) if not new <= other[key]),
                    len(items),
                )
        items.insert(index, row)
        self.timest(float(len(items)), TIM_VAR + list_id)

    def list_remove(self, option: int, list_id: int) -> list[float]:
        """Remove and return the first or last record of a list."""
        items = self._check_list(list_id, "list_remove")
        if not items:
            raise SimlibError(f"underflow of list {list_id} at time {self.sim_time:f}")
        if option == Option.FIRST:
            row = items.popleft()
        elif option == Option.LAST:
            row = items.pop()
        else:
            raise SimlibError(
                f"{option} is an invalid option for list_remove on list {list_id} "
                f"at time {self.sim_time:f}"
            )
        self.timest(float(len(items)), TIM_VAR + list_id)
        return row

    # Event calendar

    def timing(self) -> list[float]:
        """Take the next event, advance the clock to it and return its record."""
        record = self.list_remove(Option.FIRST, LIST_EVENT)
        if record[EVENT_TIME] < self.sim_time:
            raise SimlibError(
                f"attempt to schedule event type {record[EVENT_TYPE]:f} for time "
                f"{record[EVENT_TIME]:f} at time {self.sim_time:f}"
            )
        self.sim_time = record[EVENT_TIME]
        self.next_event_type = int(record[EVENT_TYPE])
        return record

    def event_schedule(
        self,
        time_of_event: float,
        event_type: int,
        record: Sequence[float] | None = None,
    ) -> None:
        """Put an event on the calendar; extra attributes come from ``record``."""
        row = self._prepare(record if record is not None else ())
        row[EVENT_TIME] = float(time_of_event)
        row[EVENT_TYPE] = float(event_type)
        self.list_file(Option.INCREASING, LIST_EVENT, row)

    def event_cancel(self, event_type: int) -> list[float] | None:
        """Remove the first event of ``event_type``; return its record or None."""
        events = self._lists[LIST_EVENT]
        low = event_type - EPSILON
        high = event_type + EPSILON
        for index, row in enumerate(events):
            if low < row[EVENT_TYPE] < high:
                del events[index]
                self.timest(float(len(events)), TIM_VAR + LIST_EVENT)
                return row
        return None

    # Discrete-time statistics

    def reset_sampst(self) -> None:
        """Clear every discrete-time accumulator."""
        self._samples = [_SampleAccumulator() for _ in range(MAX_SVAR + 1)]

    def _sample(self, variable: int) -> _SampleAccumulator:
        if not 1 <= variable <= MAX_SVAR:
            raise SimlibError(
                f"{variable} is an improper value for a sampst variable "
                f"at time {self.sim_time:f}"
            )
        return self._samples[variable]

    def sampst(self, value: float, variable: int) -> None:
        """Record one observation of a discrete-time variable."""
        acc = self._sample(variable)
        acc.total += value
        acc.maximum = max(acc.maximum, value)
        acc.minimum = min(acc.minimum, value)
        acc.count += 1

    def sampst_summary(self, variable: int) -> SampleStats:
        """Return mean, count, maximum and minimum of a discrete-time variable."""
        acc = self._sample(variable)
        mean = acc.total / acc.count if acc.count else 0.0
        return SampleStats(mean, acc.count, acc.maximum, acc.minimum)

    # Continuous-time statistics

    def reset_timest(self) -> None:
        """Clear every continuous-time accumulator, starting from now."""
        self._times = [_TimeAccumulator(self.sim_time) for _ in range(MAX_TVAR + 1)]
        self._time_reset = self.sim_time

    def _time(self, variable: int) -> _TimeAccumulator:
        if not 1 <= variable <= MAX_TVAR:
            raise SimlibError(
                f"{variable} is an improper value for a timest variable "
                f"at time {self.sim_time:f}"
            )
        return self._times[variable]

    def timest(self, value: float, variable: int) -> None:
        """Record a new level of a continuous-time variable at the current time."""
        acc = self._time(variable)
        acc.area += (self.sim_time - acc.last_change) * acc.previous
        acc.maximum = max(acc.maximum, value)
        acc.minimum = min(acc.minimum, value)
        acc.previous = value
        acc.last_change = self.sim_time

    def timest_summary(self, variable: int) -> TimeStats:
        """Return time average, maximum and minimum up to the current time."""
        acc = self._time(variable)
        acc.area += (self.sim_time - acc.last_change) * acc.previous
        acc.last_change = self.sim_time
        average = _ratio(acc.area, self.sim_time - self._time_reset)
        return TimeStats(average, acc.maximum, acc.minimum)

    def filest(self, list_id: int) -> TimeStats:
        """Return the length statistics of a list."""
        return self.timest_summary(TIM_VAR + list_id)

    # Reports

    def out_sampst(self, out: TextIO, low: int, high: int) -> None:
        """Write discrete-time statistics for variables ``low`` to ``high``."""
        if low > high or low > MAX_SVAR or high > MAX_SVAR:
            return
        out.write("\n sampst                        Number")
        out.write("\nvariable                         of")
        out.write("\n number       Average          values           Maximum")
        out.write("         Minimum")
        out.write(_RULE + _RULE_TAIL)
        for variable in range(low, high + 1):
            stats = self.sampst_summary(variable)
            out.write(f"\n\n{variable:5d}")
            for value in (stats.mean, float(stats.count), stats.maximum, stats.minimum):
                out.write(format_value(value))
        out.write(_RULE + _RULE_TAIL + "\n\n\n")

    def out_timest(self, out: TextIO, low: int, high: int) -> None:
        """Write continuous-time statistics for variables ``low`` to ``high``."""
        if low > high or low > TIM_VAR or high > TIM_VAR:
            return
        out.write("\n  timest")
        out.write("\n variable        Time")
        out.write("\n  number         average            Maximum           Minimum")
        out.write("\n_______________________________________________")
        for variable in range(low, high + 1):
            stats = self.timest_summary(variable)
            out.write(f"\n\n{variable:5d}")
            for value in (stats.average, stats.maximum, stats.minimum):
                out.write(format_value(value))
        out.write("\n________________________________________________________")
        out.write("\n\n\n")

    def out_filest(self, out: TextIO, low: int, high: int) -> None:
        """Write list-length statistics for lists ``low`` to ``high``."""
        if low > high or low > MAX_LIST or high > MAX_LIST:
            return
        out.write("\n File               Time")
        out.write("\n number              average            Maximum         Minimum")
        out.write(_WIDE_RULE)
        for list_id in range(low, high + 1):
            stats = self.filest(list_id)
            out.write(f"\n\n{list_id:5d}")
            for value in (stats.average, stats.maximum, stats.minimum):
                out.write(format_value(value))
        out.write(_WIDE_RULE)
        out.write("\n\n\n")

    # Random variates

    def expon(self, mean: float, stream: int) -> float:
        """Exponential variate with the given mean."""
        return -mean * math.log(self.rng.random(stream))

    def uniform(self, a: float, b: float, stream: int) -> float:
        """Uniform variate between ``a`` and ``b``."""
        return a + self.rng.random(stream) * (b - a)

    def erlang(self, m: int, mean: float, stream: int) -> float:
        """Erlang variate: the sum of ``m`` exponentials with total mean ``mean``."""
        mean_exponential = mean / m
        return sum(self.expon(mean_exponential, stream) for _ in range(m))

    def random_integer(self, prob_distrib: Sequence[float], stream: int) -> int:
        """Draw from a discrete distribution given as cumulative probabilities of 1, 2, ..."""
        u = self.rng.random(stream)
        for value, cumulative in enumerate(prob_distrib, start=1):
            if u < cumulative:
                return value
        raise SimlibError("cumulative distribution does not cover the drawn value")