"""Dry-cleaning shop model: suits split, cleaned, reassembled and inspected."""

from __future__ import annotations

import argparse
import io
import sys
from collections.abc import Callable, Sequence
from enum import IntEnum
from pathlib import Path

from .lcgrand import LcgRandom
from .simlib import Option, Simlib


class Event(IntEnum):
    """Event types on the calendar."""

    ARRIVAL = 1
    END_SIMULATION = 2
    DEPART1 = 3
    DEPART2 = 4
    DEPART3 = 5
    DEPART4 = 6
    DEPART5 = 7


class ListId(IntEnum):
    """Queues and servers of the shop."""

    S1_Q = 1
    S2_Q = 2
    S3_Q = 3
    S4_JQ = 4
    S4_PQ = 5
    S5_Q = 6
    S1 = 7
    S2 = 8
    S3 = 9
    S4 = 10
    S5 = 11


class Stream(IntEnum):
    """Random-number streams, one per source of randomness."""

    S1 = 1
    S2 = 2
    S3 = 3
    S4_UNDAMAGED = 4
    S4_DAMAGED = 5
    S5 = 6
    INTERARRIVAL = 7
    DAMAGE_JACKET = 8
    DAMAGE_PANTS = 9


ATTR_TIME = 1
ATTR_SUIT_ID = 2
ATTR_DAMAGE_FLAG = 3

SERVICE_S1 = 6.0
SERVICE_S2 = 4.0
SERVICE_S3 = 5.0
SERVICE_UNDAMAGED = 5.0
SERVICE_DAMAGED = 8.0
SERVICE_S5 = 12.0

JACKET_DAMAGE_PROBABILITY = 0.05
PANTS_DAMAGE_PROBABILITY = 0.10

SAMPST_UNDAMAGED = 1
SAMPST_DAMAGED = 2

_RULE = "       --------------------------------------------------\n"

_QUEUE_LABELS = (
    ("S1_Q", ListId.S1_Q),
    ("S2_Q", ListId.S2_Q),
    ("S3_Q", ListId.S3_Q),
    ("Jacket_Q (S4_JQ)", ListId.S4_JQ),
    ("Pants_Q (S4_PQ)", ListId.S4_PQ),
    ("S5_Q", ListId.S5_Q),
)

_SERVER_LABELS = (
    ("Server 1", ListId.S1),
    ("Server 2", ListId.S2),
    ("Server 3", ListId.S3),
    ("Server 4", ListId.S4),
    ("Server 5", ListId.S5),
)


class DryCleaningModel:
    """One run of the dry-cleaning system over a fixed duration."""

    def __init__(
        self,
        mean_interarrival: float,
        sim_duration: float,
        rng: LcgRandom | None = None,
    ) -> None:
        if mean_interarrival <= 0:
            raise ValueError("mean interarrival time must be positive")
        self.mean_interarrival = float(mean_interarrival)
        self.sim_duration = float(sim_duration)
        self.simlib = Simlib(max_attr=4, rng=rng)
        self.suits_accepted = 0
        self._ran = False

    # Event handlers

    def _schedule(self, delay: float, event: Event) -> None:
        self.simlib.event_schedule(self.simlib.sim_time + delay, event)

    def _start_service(
        self, server: ListId, record: list[float], mean: float, stream: Stream, event: Event
    ) -> None:
        self.simlib.list_file(Option.FIRST, server, record)
        self._schedule(self.simlib.expon(mean, stream), event)

    def _serve_or_queue(
        self,
        server: ListId,
        queue: ListId,
        record: list[float],
        mean: float,
        stream: Stream,
        event: Event,
    ) -> None:
        if self.simlib.list_size(server) == 0:
            self._start_service(server, record, mean, stream, event)
        else:
            self.simlib.list_file(Option.LAST, queue, record)

    def _serve_next(
        self, server: ListId, queue: ListId, mean: float, stream: Stream, event: Event
    ) -> None:
        if self.simlib.list_size(queue) > 0:
            record = self.simlib.list_remove(Option.FIRST, queue)
            self._start_service(server, record, mean, stream, event)

    def _arrive(self) -> None:
        sim = self.simlib
        suit = sim.new_record()
        suit[ATTR_TIME] = sim.sim_time
        self.suits_accepted += 1
        suit[ATTR_SUIT_ID] = float(self.suits_accepted)
        self._serve_or_queue(
            ListId.S1, ListId.S1_Q, suit, SERVICE_S1, Stream.S1, Event.DEPART1
        )
        self._schedule(
            sim.expon(self.mean_interarrival, Stream.INTERARRIVAL), Event.ARRIVAL
        )

    def _depart1(self) -> None:
        suit = self.simlib.list_remove(Option.FIRST, ListId.S1)
        # The suit splits into a jacket and a pair of pants sharing its attributes.
        self._serve_or_queue(
            ListId.S2, ListId.S2_Q, suit, SERVICE_S2, Stream.S2, Event.DEPART2
        )
        self._serve_or_queue(
            ListId.S3, ListId.S3_Q, suit, SERVICE_S3, Stream.S3, Event.DEPART3
        )
        self._serve_next(ListId.S1, ListId.S1_Q, SERVICE_S1, Stream.S1, Event.DEPART1)

    def _finish_piece(
        self, server: ListId, wait_queue: ListId, probability: float, stream: Stream
    ) -> None:
        sim = self.simlib
        piece = sim.list_remove(Option.FIRST, server)
        piece[ATTR_DAMAGE_FLAG] = 1.0 if sim.uniform(0, 1, stream) < probability else 0.0
        sim.list_file(Option.LAST, wait_queue, piece)
        if sim.list_size(ListId.S4) == 0:
            self._reassemble()

    def _depart2(self) -> None:
        self._finish_piece(
            ListId.S2, ListId.S4_JQ, JACKET_DAMAGE_PROBABILITY, Stream.DAMAGE_JACKET
        )
        self._serve_next(ListId.S2, ListId.S2_Q, SERVICE_S2, Stream.S2, Event.DEPART2)

    def _depart3(self) -> None:
        self._finish_piece(
            ListId.S3, ListId.S4_PQ, PANTS_DAMAGE_PROBABILITY, Stream.DAMAGE_PANTS
        )
        self._serve_next(ListId.S3, ListId.S3_Q, SERVICE_S3, Stream.S3, Event.DEPART3)

    def _reassemble(self) -> None:
        sim = self.simlib
        jacket = sim.peek(ListId.S4_JQ)
        pants = sim.peek(ListId.S4_PQ)
        if jacket is None or pants is None:
            return
        if int(jacket[ATTR_SUIT_ID]) != int(pants[ATTR_SUIT_ID]):
            return
        jacket = sim.list_remove(Option.FIRST, ListId.S4_JQ)
        suit = sim.list_remove(Option.FIRST, ListId.S4_PQ)
        damaged = bool(int(jacket[ATTR_DAMAGE_FLAG])) or bool(int(suit[ATTR_DAMAGE_FLAG]))
        suit[ATTR_DAMAGE_FLAG] = 1.0 if damaged else 0.0
        if damaged:
            service = sim.expon(SERVICE_DAMAGED, Stream.S4_DAMAGED)
        else:
            service = sim.expon(SERVICE_UNDAMAGED, Stream.S4_UNDAMAGED)
        sim.list_file(Option.FIRST, ListId.S4, suit)
        self._schedule(service, Event.DEPART4)

    def _depart4(self) -> None:
        sim = self.simlib
        suit = sim.list_remove(Option.FIRST, ListId.S4)
        if suit[ATTR_DAMAGE_FLAG] == 1:
            # An idle server 5 takes the suit with the damaged-reassembly service time.
            self._serve_or_queue(
                ListId.S5,
                ListId.S5_Q,
                suit,
                SERVICE_DAMAGED,
                Stream.S4_DAMAGED,
                Event.DEPART5,
            )
        else:
            sim.sampst(sim.sim_time - suit[ATTR_TIME], SAMPST_UNDAMAGED)
        self._reassemble()

    def _depart5(self) -> None:
        sim = self.simlib
        suit = sim.list_remove(Option.FIRST, ListId.S5)
        sim.sampst(sim.sim_time - suit[ATTR_TIME], SAMPST_DAMAGED)
        self._serve_next(ListId.S5, ListId.S5_Q, SERVICE_S5, Stream.S5, Event.DEPART5)

    # Running and reporting

    def run(self) -> str:
        """Simulate until the end event and return the report."""
        if self._ran:
            raise RuntimeError("this model has already been run")
        self._ran = True
        sim = self.simlib
        self._schedule(
            sim.expon(self.mean_interarrival, Stream.INTERARRIVAL), Event.ARRIVAL
        )
        sim.event_schedule(self.sim_duration, Event.END_SIMULATION)
        handlers: dict[int, Callable[[], None]] = {
            Event.ARRIVAL: self._arrive,
            Event.DEPART1: self._depart1,
            Event.DEPART2: self._depart2,
            Event.DEPART3: self._depart3,
            Event.DEPART4: self._depart4,
            Event.DEPART5: self._depart5,
        }
        while True:
            sim.timing()
            if sim.next_event_type == Event.END_SIMULATION:
                return self.report()
            handlers[sim.next_event_type]()

    def _list_line(self, label: str, list_id: ListId) -> str:
        stats = self.simlib.filest(list_id)
        if stats.maximum < 0:
            return "%-18s | Avg:  -     | Max:  -\n" % label
        return "%-18s | Avg: %6.3f | Max: %d\n" % (label, stats.average, int(stats.maximum))

    def report(self) -> str:
        """Return the text report of the statistics gathered so far."""
        sim = self.simlib
        out = io.StringIO()
        out.write("\n\n")
        out.write(_RULE)
        out.write("               Dry-cleaning System Simulation Report     \n")
        out.write(_RULE + "\n")
        out.write("Mean interarrival time: %.2f minutes\n" % self.mean_interarrival)
        out.write("Simulation duration: %.2f minutes\n\n" % self.sim_duration)
        out.write("System Time for Suits, Undamaged(1) and Damaged(2):\n")
        out.write("------------------------------------------------\n")
        sim.out_sampst(out, SAMPST_UNDAMAGED, SAMPST_DAMAGED)
        out.write("\nQueue Lengths and Server Utilization:\n")
        out.write("--------------------------------------\n\n")
        out.write("Queue Statistics:\n")
        for label, list_id in _QUEUE_LABELS:
            out.write(self._list_line(label, list_id))
        out.write("\nServer Utilization (Avg should be \u2264 1):\n")
        for label, list_id in _SERVER_LABELS:
            out.write(self._list_line(label, list_id))
        out.write("\nTotal suits accepted into system: %d\n" % self.suits_accepted)
        processed = (
            sim.sampst_summary(SAMPST_UNDAMAGED).count
            + sim.sampst_summary(SAMPST_DAMAGED).count
        )
        out.write("Total suits successfully processed: %d\n" % processed)
        out.write("Simulation ended at time: %.2f minutes\n" % sim.sim_time)
        return out.getvalue()


def read_parameters(path: str | Path) -> tuple[float, float]:
    """Read the mean interarrival time and the simulation duration from a file."""
    tokens = Path(path).read_text().split()
    if len(tokens) < 2:
        raise ValueError(f"{path}: expected mean interarrival time and duration")
    try:
        return float(tokens[0]), float(tokens[1])
    except ValueError:
        raise ValueError(f"{path}: parameters must be numbers") from None


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulation from an input file and write the report to a file."""
    parser = argparse.ArgumentParser(
        prog="drycleansim", description="Simulate a dry-cleaning shop."
    )
    parser.add_argument("-i", "--input", default="input.txt", help="parameter file")
    parser.add_argument("-o", "--output", default="output.txt", help="report file")
    args = parser.parse_args(argv)
    try:
        mean_interarrival, sim_duration = read_parameters(args.input)
        report = DryCleaningModel(mean_interarrival, sim_duration).run()
        Path(args.output).write_text(report, encoding="utf-8")
    except (OSError, ValueError) as exc:
        print(f"drycleansim: {exc}", file=sys.stderr)
        return 1
    print(
        f"Simulation complete. You can find the report in {args.output} "
        "in the folder you ran this executable."
    )
    return 0